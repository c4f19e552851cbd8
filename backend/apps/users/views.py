from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api.pagination import page_spec_from_query
from apps.api.permissions import IsAdmin
from apps.api.schemas import ErrorResponseSerializer, paginated_response
from apps.api.utils import page_payload
from apps.common import get_logger

from .commands import UserWriteCommand
from .container import build_user_service
from .serializers import UserReadSerializer, UserWriteSerializer

logger = get_logger(__name__).bind(component="users", layer="view")


def _user_command(validated_data) -> UserWriteCommand:
    return UserWriteCommand(
        first_name=validated_data.get("first_name", "").strip(),
        last_name=validated_data.get("last_name", "").strip(),
        email=validated_data.get("email", "").strip(),
        password=validated_data.get("password") or None,
        role_ids=list(dict.fromkeys(validated_data.get("roles") or [])),
    )


@extend_schema(tags=["Users"])
class UserListView(APIView):
    permission_classes = [IsAdmin]
    service = build_user_service()
    log = logger.bind(view="UserListView")

    @extend_schema(
        operation_id="users_list",
        summary="List users",
        parameters=[
            OpenApiParameter("page", int, required=False),
            OpenApiParameter("size", int, required=False),
            OpenApiParameter("sort", str, required=False, many=True),
        ],
        responses={
            200: paginated_response(UserReadSerializer),
            400: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request):
        page_spec = page_spec_from_query(request.query_params)
        self.log.debug("Listing users via API", page=page_spec.page, size=page_spec.size)
        page = self.service.find_page(page_spec)
        return Response(page_payload(page, lambda dto: UserReadSerializer(dto).data))

    @extend_schema(
        summary="Create user",
        request=UserWriteSerializer,
        responses={
            201: UserReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = UserWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.log.info("Creating user via API", email=serializer.validated_data.get("email"))
        dto = self.service.insert(_user_command(serializer.validated_data))
        self.log.info("User created via API", user_id=dto.id)
        return Response(
            UserReadSerializer(dto).data,
            status=status.HTTP_201_CREATED,
            headers={"Location": request.build_absolute_uri(f"{dto.id}/")},
        )


@extend_schema(tags=["Users"])
class UserDetailView(APIView):
    permission_classes = [IsAdmin]
    service = build_user_service()
    log = logger.bind(view="UserDetailView")

    @extend_schema(
        operation_id="users_retrieve",
        summary="Get user by ID",
        parameters=[OpenApiParameter("user_id", int, OpenApiParameter.PATH)],
        responses={
            200: UserReadSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request, user_id: int):
        self.log.debug("Fetching user detail", user_id=user_id)
        return Response(UserReadSerializer(self.service.find_by_id(user_id)).data)

    @extend_schema(
        summary="Replace user",
        request=UserWriteSerializer,
        responses={
            200: UserReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def put(self, request, user_id: int):
        serializer = UserWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.log.info("Replacing user", user_id=user_id)
        dto = self.service.update(user_id, _user_command(serializer.validated_data))
        return Response(UserReadSerializer(dto).data)

    @extend_schema(
        summary="Delete user",
        responses={
            204: None,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def delete(self, request, user_id: int):
        self.log.info("Deleting user", user_id=user_id)
        self.service.delete(user_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
