"""Closed set of document types and the fields each one requires.

Residents send a free-form field map. At the boundary it is split into the
fields the document type requires (validated here) and an extension map of
template-specific values that the lifecycle never interprets.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from fulfillment.domain.errors import ValidationError


class DocumentType(str, Enum):
    CLEARANCE = "Brgy Clearance"
    BUSINESS_PERMIT = "Brgy Business Permit"
    INDIGENCY = "Brgy Indigency"
    RESIDENCY = "Brgy Residency"
    CERTIFICATION = "Brgy Certification"


class CertificationPurpose(str, Enum):
    SOLO_PARENT = "Solo Parent Certification"
    DELAYED_REGISTRATION = "Delayed Registration of Birth Certificate"
    GOOD_MORAL = "Good Moral Character"
    FIRST_TIME_JOB_SEEKER = "First Time Job Seeker"
    SENIOR_CITIZEN = "Senior Citizen Certification"
    PWD = "PWD Certification"
    COHABITATION = "Cohabitation Certificate"
    NO_INCOME = "No Income Certificate"


REQUIRED_FIELDS: Mapping[DocumentType, tuple[str, ...]] = MappingProxyType({
    DocumentType.CLEARANCE: ("purpose",),
    DocumentType.BUSINESS_PERMIT: ("businessName", "businessOwner", "businessAddress", "purpose"),
    DocumentType.INDIGENCY: ("purpose",),
    DocumentType.RESIDENCY: ("purpose",),
    DocumentType.CERTIFICATION: ("purpose",),
})

CERTIFICATION_FIELDS: Mapping[CertificationPurpose, tuple[str, ...]] = MappingProxyType({
    CertificationPurpose.SOLO_PARENT: ("childName", "childBirthDate"),
    CertificationPurpose.DELAYED_REGISTRATION: ("registrationOffice", "registrationDate"),
})

DATE_FIELDS = frozenset({"childBirthDate", "registrationDate"})

_PURPOSES_BY_VALUE = {purpose.value: purpose for purpose in CertificationPurpose}


@dataclass(frozen=True)
class DocumentFields:
    """Validated document data carried by a document request's line item."""

    document_type: DocumentType
    required: Mapping[str, str]
    extensions: Mapping[str, Any] = field(default_factory=dict)

    def as_json(self) -> dict[str, Any]:
        return {**self.extensions, **self.required}

    @classmethod
    def from_json(cls, document_type: str, data: Mapping[str, Any]) -> "DocumentFields":
        """Rebuild stored fields without re-validating them."""
        doc_type = DocumentType(document_type)
        names = set(REQUIRED_FIELDS[doc_type])
        if doc_type is DocumentType.CERTIFICATION:
            purpose = _PURPOSES_BY_VALUE.get(data.get("purpose"))
            names.update(CERTIFICATION_FIELDS.get(purpose, ()))
        return cls(
            document_type=doc_type,
            required={k: v for k, v in data.items() if k in names},
            extensions={k: v for k, v in data.items() if k not in names},
        )


def _parse_document_type(value: str) -> DocumentType:
    try:
        return DocumentType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in DocumentType)
        raise ValidationError(
            f"Unknown document type {value!r}; expected one of: {allowed}",
            field_name="document_type",
        ) from None


def _require_text(raw: Mapping[str, Any], name: str) -> str:
    value = raw.get(name)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Field '{name}' is required", field_name=f"fields.{name}")
    value = value.strip()
    if name in DATE_FIELDS:
        try:
            date.fromisoformat(value)
        except ValueError:
            raise ValidationError(
                f"Field '{name}' must be a date in YYYY-MM-DD format",
                field_name=f"fields.{name}",
            ) from None
    return value


def parse_document_fields(document_type: str, raw: Mapping[str, Any] | None) -> DocumentFields:
    """Validate ``raw`` against the variant for ``document_type``.

    Raises:
        ValidationError: If the type is unknown or a required field is
            missing or malformed.
    """
    doc_type = _parse_document_type(document_type)
    raw = dict(raw or {})

    names = list(REQUIRED_FIELDS[doc_type])
    required = {name: _require_text(raw, name) for name in names}

    if doc_type is DocumentType.CERTIFICATION:
        try:
            purpose = CertificationPurpose(required["purpose"])
        except ValueError:
            raise ValidationError(
                f"Unknown certification type {required['purpose']!r}",
                field_name="fields.purpose",
            ) from None
        for name in CERTIFICATION_FIELDS.get(purpose, ()):
            required[name] = _require_text(raw, name)

    extensions = {k: v for k, v in raw.items() if k not in required}
    return DocumentFields(document_type=doc_type, required=required, extensions=extensions)
