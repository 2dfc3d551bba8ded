"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

import uuid

from django.db import models

from festivals.domain import AccountStatus, FestivalPhase, PerformancePhase, Role


def _choices(enum_type) -> list[tuple[str, str]]:
    return [(member.value, member.value) for member in enum_type]


class User(models.Model):
    """Persistence model for user accounts."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = models.CharField(max_length=150, unique=True)
    password_hash = models.CharField(max_length=255)
    role = models.CharField(max_length=20, choices=_choices(Role))
    account_status = models.CharField(
        max_length=20,
        choices=_choices(AccountStatus),
        default=AccountStatus.ACTIVE.value,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["username"]

    def __str__(self) -> str:
        return self.username


class Festival(models.Model):
    """Persistence model for festivals."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True, default="")
    start_date = models.DateField(blank=True, null=True)
    end_date = models.DateField(blank=True, null=True)
    venue = models.CharField(max_length=255, blank=True, default="")
    organizers = models.ManyToManyField(User, related_name="organized_festivals")
    phase = models.CharField(
        max_length=20,
        choices=_choices(FestivalPhase),
        default=FestivalPhase.CREATED.value,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"]),
        ]

    def __str__(self) -> str:
        return self.name


class Performance(models.Model):
    """Persistence model for performances submitted to a festival."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    festival = models.ForeignKey(
        Festival, on_delete=models.CASCADE, related_name="performances"
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    genre = models.CharField(max_length=100, blank=True, default="")
    duration = models.PositiveIntegerField(blank=True, null=True)
    band_members = models.JSONField(default=list, blank=True)
    creator = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="created_performances"
    )
    phase = models.CharField(
        max_length=20,
        choices=_choices(PerformancePhase),
        default=PerformancePhase.CREATED.value,
    )
    staff_assigned = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="assigned_performances",
    )
    review_score = models.FloatField(blank=True, null=True)
    review_comments = models.TextField(blank=True, null=True)
    setlist = models.JSONField(default=list, blank=True)
    preferred_rehearsal_slots = models.JSONField(default=list, blank=True)
    preferred_performance_slots = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["festival", "name"], name="unique_performance_name_per_festival"
            ),
        ]
        indexes = [
            models.Index(fields=["festival", "-created_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.festival.name} - {self.name}"
