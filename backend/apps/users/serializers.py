from django.utils.translation import gettext_lazy as _
from rest_framework import serializers


class RoleSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    authority = serializers.CharField(read_only=True)


class UserReadSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    first_name = serializers.CharField()
    last_name = serializers.CharField()
    email = serializers.EmailField()
    roles = RoleSerializer(many=True)


class RoleReferenceField(serializers.IntegerField):
    """Accepts either a bare role id or an object with an ``id`` key."""

    def to_internal_value(self, data):
        if isinstance(data, dict):
            if "id" not in data:
                raise serializers.ValidationError(_("Role reference needs an id."))
            data = data["id"]
        return super().to_internal_value(data)


class UserWriteSerializer(serializers.Serializer):
    # Only shapes the payload; field rules live in UserValidator so that
    # INSERT and UPDATE can differ on the password.
    first_name = serializers.CharField(allow_blank=True, max_length=150)
    last_name = serializers.CharField(
        allow_blank=True, required=False, default="", max_length=150
    )
    email = serializers.CharField(allow_blank=True, max_length=254)
    password = serializers.CharField(
        write_only=True,
        required=False,
        allow_blank=True,
        allow_null=True,
        trim_whitespace=False,
        default=None,
        style={"input_type": "password"},
    )
    roles = serializers.ListField(
        child=RoleReferenceField(min_value=1), required=False, default=list
    )
