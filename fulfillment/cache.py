"""Cache keys and helpers for the status counts projection."""

from uuid import UUID

from django.conf import settings
from django.core.cache import cache

from fulfillment.domain import StatusCounts


def status_counts_key(kind: str, resident_id: UUID | None = None) -> str:
    scope = str(resident_id) if resident_id is not None else "all"
    return f"requests:{kind}:status-counts:{scope}"


def get_status_counts(kind: str, resident_id: UUID | None = None) -> StatusCounts | None:
    cached = cache.get(status_counts_key(kind, resident_id))
    return StatusCounts(**cached) if cached is not None else None


def set_status_counts(kind: str, resident_id: UUID | None, counts: StatusCounts) -> None:
    cache.set(
        status_counts_key(kind, resident_id),
        counts.as_dict(),
        timeout=settings.STATUS_COUNTS_CACHE_TTL,
    )


def invalidate_status_counts(kind: str, resident_id: UUID | None) -> None:
    keys = [status_counts_key(kind)]
    if resident_id is not None:
        keys.append(status_counts_key(kind, resident_id))
    cache.delete_many(keys)
