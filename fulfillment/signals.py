"""Django signals for cache invalidation.

Lifecycle writes are conditional ``UPDATE`` statements that bypass
``post_save``, so the stores send ``request_state_changed`` after commit.
"""

from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal, receiver

from fulfillment.cache import invalidate_status_counts
from fulfillment.models import ServiceRequest

# Sent with kind=<RequestKind value>, resident_id=<UUID>.
request_state_changed = Signal()


@receiver([post_save, post_delete], sender=ServiceRequest)
def invalidate_on_save(sender, instance, **kwargs):
    """Invalidate status counts when a request row is saved or deleted."""
    invalidate_status_counts(instance.kind, instance.resident_id)


@receiver(request_state_changed, sender=ServiceRequest)
def invalidate_on_transition(sender, kind, resident_id, **kwargs):
    """Invalidate status counts after a committed lifecycle transition."""
    invalidate_status_counts(kind, resident_id)
