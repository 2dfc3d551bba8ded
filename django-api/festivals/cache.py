"""Cache keys and invalidation for read responses."""

from django.conf import settings
from django.core.cache import cache

FESTIVAL_LIST_KEY = "festivals:list"


def festival_key(festival_id: object) -> str:
    return f"festivals:{festival_id}"


def festival_performances_key(festival_id: object) -> str:
    return f"festivals:{festival_id}:performances"


def performance_key(performance_id: object) -> str:
    return f"performances:{performance_id}"


def timeout() -> int:
    return getattr(settings, "FESTIVALS_CACHE_TIMEOUT", 300)


def invalidate_festival(festival_id: object) -> None:
    cache.delete_many([FESTIVAL_LIST_KEY, festival_key(festival_id)])


def invalidate_performance(performance_id: object, festival_id: object) -> None:
    cache.delete_many([performance_key(performance_id), festival_performances_key(festival_id)])
