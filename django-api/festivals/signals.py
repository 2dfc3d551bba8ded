"""Django signals for cache invalidation.

Conditional updates issued by the store bypass these signals; the store
invalidates explicitly after a successful compare-and-swap.
"""

from django.db.models.signals import post_delete, post_save, pre_delete
from django.dispatch import receiver

from festivals import cache
from festivals.models import Festival, Performance, User


@receiver([post_save, post_delete], sender=Festival)
def invalidate_festival_cache(sender, instance, **kwargs):
    """Invalidate caches when a festival is saved or deleted."""
    cache.invalidate_festival(instance.pk)


@receiver([post_save, post_delete], sender=Performance)
def invalidate_performance_cache(sender, instance, **kwargs):
    """Invalidate caches when a performance is saved or deleted."""
    cache.invalidate_performance(instance.pk, instance.festival_id)


@receiver(pre_delete, sender=User)
def invalidate_user_references(sender, instance, **kwargs):
    """Invalidate festivals and performances that reference a deleted user.

    Removing organizer rows and nulling ``staff_assigned`` happen without
    saving the referencing rows, so their signals never fire.
    """
    for festival_id in instance.organized_festivals.values_list("pk", flat=True):
        cache.invalidate_festival(festival_id)
    for performance_id, festival_id in instance.assigned_performances.values_list("pk", "festival_id"):
        cache.invalidate_performance(performance_id, festival_id)
