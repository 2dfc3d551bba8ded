"""Serializers for transforming domain models to API responses and for
coercing request payloads.

Input serializers only check formats; required fields and workflow rules
are enforced by the workflow service so that they hold for every caller.
"""

from rest_framework import serializers

from festivals.domain import AccountStatus, Role


class UserSerializer(serializers.Serializer):
    """Serializer for User domain model. The password hash never leaves."""

    id = serializers.UUIDField(source="id.value")
    username = serializers.CharField()
    role = serializers.CharField(source="role.value")
    account_status = serializers.CharField(source="account_status.value")


class DateRangeSerializer(serializers.Serializer):
    start = serializers.DateField(required=False, allow_null=True)
    end = serializers.DateField(required=False, allow_null=True)


class FestivalSerializer(serializers.Serializer):
    """Serializer for Festival domain model."""

    id = serializers.UUIDField(source="id.value")
    name = serializers.CharField()
    description = serializers.CharField()
    dates = DateRangeSerializer()
    venue = serializers.CharField()
    organizers = serializers.SerializerMethodField()
    phase = serializers.CharField(source="phase.value")
    created_at = serializers.DateTimeField()

    def get_organizers(self, festival) -> list[str]:
        return [str(organizer_id) for organizer_id in festival.organizer_ids]


class ReviewSerializer(serializers.Serializer):
    score = serializers.FloatField()
    comments = serializers.CharField()


class PerformanceSerializer(serializers.Serializer):
    """Serializer for Performance domain model."""

    id = serializers.UUIDField(source="id.value")
    festival_id = serializers.UUIDField(source="festival_id.value")
    name = serializers.CharField()
    description = serializers.CharField()
    genre = serializers.CharField()
    duration = serializers.IntegerField(allow_null=True)
    band_members = serializers.ListField(child=serializers.CharField())
    creator_id = serializers.UUIDField(source="creator_id.value")
    phase = serializers.CharField(source="phase.value")
    staff_assigned_id = serializers.UUIDField(source="staff_assigned_id.value", allow_null=True)
    review = ReviewSerializer(allow_null=True)
    setlist = serializers.ListField(child=serializers.CharField())
    preferred_rehearsal_slots = serializers.ListField(child=serializers.CharField())
    preferred_performance_slots = serializers.ListField(child=serializers.CharField())
    created_at = serializers.DateTimeField()


# Request payloads


class RegisterInputSerializer(serializers.Serializer):
    username = serializers.CharField(required=False, max_length=150)
    password = serializers.CharField(required=False, write_only=True)
    role = serializers.ChoiceField(choices=[role.value for role in Role], required=False)


class LoginInputSerializer(serializers.Serializer):
    username = serializers.CharField(required=False, default="")
    password = serializers.CharField(required=False, default="")


class ChangePasswordInputSerializer(serializers.Serializer):
    old_password = serializers.CharField(required=False)
    new_password = serializers.CharField(required=False)


class AccountStatusInputSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[status.value for status in AccountStatus], required=False)


class FestivalInputSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    dates = DateRangeSerializer(required=False)
    venue = serializers.CharField(required=False, allow_blank=True, max_length=255)


class OrganizerInputSerializer(serializers.Serializer):
    organizer_id = serializers.UUIDField(required=False)


class PerformanceInputSerializer(serializers.Serializer):
    festival_id = serializers.UUIDField(required=False)
    name = serializers.CharField(required=False, max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    genre = serializers.CharField(required=False, allow_blank=True, max_length=100)
    duration = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    band_members = serializers.ListField(child=serializers.CharField(), required=False)


class AssignStaffInputSerializer(serializers.Serializer):
    staff_id = serializers.UUIDField(required=False)


class ReviewInputSerializer(serializers.Serializer):
    score = serializers.FloatField(required=False, allow_null=True)
    comments = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class FinalSubmissionInputSerializer(serializers.Serializer):
    setlist = serializers.ListField(child=serializers.CharField(), required=False)
    preferred_rehearsal_slots = serializers.ListField(child=serializers.CharField(), required=False)
    preferred_performance_slots = serializers.ListField(child=serializers.CharField(), required=False)
