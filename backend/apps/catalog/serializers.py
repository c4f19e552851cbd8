from django.utils.translation import gettext_lazy as _
from rest_framework import serializers


class CategorySerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)


class ProductReadSerializer(serializers.Serializer):
    # Matches ProductDTO; price is rendered as a fixed two-place string.
    id = serializers.IntegerField()
    name = serializers.CharField()
    description = serializers.CharField()
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    img_url = serializers.CharField()
    date = serializers.DateTimeField(allow_null=True)
    categories = CategorySerializer(many=True)


class CategoryReferenceField(serializers.IntegerField):
    """Accepts either a bare id or an object with an ``id`` key."""

    def to_internal_value(self, data):
        if isinstance(data, dict):
            if "id" not in data:
                raise serializers.ValidationError(_("Category reference needs an id."))
            data = data["id"]
        return super().to_internal_value(data)


class ProductWriteSerializer(serializers.Serializer):
    # 'id' is assigned by the store and never read from the payload.
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(allow_blank=True, required=False, default="")
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    img_url = serializers.CharField(allow_blank=True, required=False, default="")
    date = serializers.DateTimeField(required=False, allow_null=True, default=None)
    categories = serializers.ListField(
        child=CategoryReferenceField(min_value=1),
        allow_empty=False,
        error_messages={"empty": _("Product must reference at least one category.")},
    )

    def validate_categories(self, value):
        deduplicated = []
        for category_id in value:
            if category_id not in deduplicated:
                deduplicated.append(category_id)
        return deduplicated
