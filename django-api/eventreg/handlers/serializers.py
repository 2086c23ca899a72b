"""Serializers for transforming domain models to API responses.

Request serializers check shape only. Business validation (email format,
group size, capacity) belongs to the services so that each rejection keeps
its own error code.
"""

from rest_framework import serializers

from eventreg.services.catalog_service import MAX_LIMIT


class CategorySerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    color = serializers.CharField()


class CapacitySerializer(serializers.Serializer):
    max = serializers.IntegerField(source="maximum")
    registered = serializers.IntegerField()


class PricingSerializer(serializers.Serializer):
    individual = serializers.DecimalField(
        source="individual.amount",
        max_digits=12,
        decimal_places=2,
        coerce_to_string=False,
    )


class LocationSerializer(serializers.Serializer):
    type = serializers.CharField(source="type.value")
    address = serializers.CharField(allow_null=True)


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.CharField(source="id.value")
    title = serializers.CharField()
    description = serializers.CharField()
    date = serializers.CharField()
    category = CategorySerializer()
    capacity = CapacitySerializer()
    pricing = PricingSerializer()
    location = LocationSerializer()


class AttendeeSerializer(serializers.Serializer):
    """Serializer for the attendee side of a Registration domain model."""

    email = serializers.CharField(source="attendee_email")
    name = serializers.CharField(source="attendee_name")
    groupSize = serializers.IntegerField(source="group_size")
    registeredAt = serializers.DateTimeField(source="registered_at")


class RegistrationRequestSerializer(serializers.Serializer):
    attendeeEmail = serializers.CharField(trim_whitespace=False)
    attendeeName = serializers.CharField(trim_whitespace=False)
    # Passed through untouched; the service decides what a valid size is
    groupSize = serializers.JSONField(required=False)


class EventListQuerySerializer(serializers.Serializer):
    category = serializers.CharField(required=False, allow_blank=True)
    search = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=["available", "full"], required=False)
    limit = serializers.IntegerField(min_value=1, max_value=MAX_LIMIT, required=False)
    continuationToken = serializers.CharField(required=False)
