from drf_spectacular.utils import inline_serializer
from rest_framework import serializers


class ErrorDetailSerializer(serializers.Serializer):
    code = serializers.CharField()
    message = serializers.CharField()
    status = serializers.IntegerField()
    details = serializers.JSONField(required=False)
    hint = serializers.CharField(required=False, allow_blank=True)


class ErrorResponseSerializer(serializers.Serializer):
    error = ErrorDetailSerializer()


def paginated_response(
    item_serializer_class: type[serializers.Serializer],
) -> serializers.Serializer:
    """Inline serializer describing the zero-based page envelope.

    Fields: content[item], number, size, totalElements, totalPages,
    numberOfElements, first, last, empty.
    """
    name = getattr(item_serializer_class, "__name__", "Items")
    return inline_serializer(
        name=f"Page{name}",
        fields={
            "content": item_serializer_class(many=True),
            "number": serializers.IntegerField(),
            "size": serializers.IntegerField(),
            "totalElements": serializers.IntegerField(),
            "totalPages": serializers.IntegerField(),
            "numberOfElements": serializers.IntegerField(),
            "first": serializers.BooleanField(),
            "last": serializers.BooleanField(),
            "empty": serializers.BooleanField(),
        },
    )
