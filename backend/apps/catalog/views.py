from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api.permissions import IsOperatorOrReadOnly
from apps.api.schemas import ErrorResponseSerializer, paginated_response
from apps.api.pagination import page_spec_from_query
from apps.api.utils import page_payload
from apps.common import get_logger

from .commands import ProductWriteCommand
from .container import build_category_service, build_product_service
from .filters import category_filter_from_query
from .serializers import CategorySerializer, ProductReadSerializer, ProductWriteSerializer

logger = get_logger(__name__).bind(component="catalog", layer="view")


def _product_command(validated_data) -> ProductWriteCommand:
    return ProductWriteCommand(
        name=validated_data["name"],
        description=validated_data.get("description", ""),
        price=validated_data["price"],
        img_url=validated_data.get("img_url", ""),
        date=validated_data.get("date"),
        category_ids=list(validated_data["categories"]),
    )


@extend_schema(tags=["Catalog"])
class ProductListView(APIView):
    permission_classes = [IsOperatorOrReadOnly]
    service = build_product_service()
    log = logger.bind(view="ProductListView")

    @extend_schema(
        operation_id="products_list",
        summary="List products",
        description="Zero-based paging via ?page, ?size and repeatable ?sort=field,asc|desc.",
        parameters=[
            OpenApiParameter("page", int, required=False),
            OpenApiParameter("size", int, required=False),
            OpenApiParameter("sort", str, required=False, many=True),
            OpenApiParameter(
                "categoryId", int, required=False, description="Filter by category id"
            ),
            OpenApiParameter(
                "name", str, required=False, description="Case-insensitive name fragment"
            ),
        ],
        responses={
            200: paginated_response(ProductReadSerializer),
            400: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request):
        page_spec = page_spec_from_query(request.query_params)
        category_id = category_filter_from_query(request.query_params)
        name = request.query_params.get("name", "")
        self.log.debug(
            "Handling product list request",
            page=page_spec.page,
            size=page_spec.size,
            category_id=category_id,
        )
        page = self.service.find_page(page_spec, category_id, name)
        return Response(
            page_payload(page, lambda dto: ProductReadSerializer(dto).data)
        )

    @extend_schema(
        summary="Create product",
        request=ProductWriteSerializer,
        responses={
            201: ProductReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.log.info(
            "Creating product via API", name=serializer.validated_data.get("name")
        )
        dto = self.service.insert(_product_command(serializer.validated_data))
        self.log.info("Product created via API", product_id=dto.id)
        return Response(
            ProductReadSerializer(dto).data,
            status=status.HTTP_201_CREATED,
            headers={"Location": request.build_absolute_uri(f"{dto.id}/")},
        )


@extend_schema(tags=["Catalog"])
class ProductDetailView(APIView):
    permission_classes = [IsOperatorOrReadOnly]
    service = build_product_service()
    log = logger.bind(view="ProductDetailView")

    @extend_schema(
        operation_id="products_retrieve",
        summary="Get product",
        parameters=[OpenApiParameter("product_id", int, OpenApiParameter.PATH)],
        responses={
            200: ProductReadSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request, product_id: int):
        self.log.debug("Fetching product detail", product_id=product_id)
        dto = self.service.find_by_id(product_id)
        return Response(ProductReadSerializer(dto).data)

    @extend_schema(
        summary="Replace product",
        request=ProductWriteSerializer,
        responses={
            200: ProductReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def put(self, request, product_id: int):
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.log.info("Replacing product", product_id=product_id)
        dto = self.service.update(product_id, _product_command(serializer.validated_data))
        return Response(ProductReadSerializer(dto).data)

    @extend_schema(
        summary="Delete product",
        responses={
            204: None,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def delete(self, request, product_id: int):
        self.log.info("Deleting product", product_id=product_id)
        self.service.delete(product_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(tags=["Catalog"])
class CategoryListView(APIView):
    permission_classes = [AllowAny]
    service = build_category_service()
    log = logger.bind(view="CategoryListView")

    PAGING_PARAMS = ("page", "size", "sort")

    @extend_schema(
        summary="List categories",
        description=(
            "Plain list ordered by name. Passing ?page, ?size or ?sort returns "
            "the paged shape instead."
        ),
        parameters=[
            OpenApiParameter("page", int, required=False),
            OpenApiParameter("size", int, required=False),
            OpenApiParameter("sort", str, required=False, many=True),
        ],
        responses={
            200: CategorySerializer(many=True),
            400: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request):
        if not any(param in request.query_params for param in self.PAGING_PARAMS):
            self.log.debug("Listing categories")
            data = self.service.list_categories()
            return Response(CategorySerializer(data, many=True).data)
        page_spec = page_spec_from_query(request.query_params)
        self.log.debug("Listing category page", page=page_spec.page, size=page_spec.size)
        page = self.service.find_page(page_spec)
        return Response(page_payload(page, lambda dto: CategorySerializer(dto).data))


@extend_schema(tags=["Catalog"])
class CategoryDetailView(APIView):
    permission_classes = [AllowAny]
    service = build_category_service()
    log = logger.bind(view="CategoryDetailView")

    @extend_schema(
        summary="Get category",
        parameters=[OpenApiParameter("category_id", int, OpenApiParameter.PATH)],
        responses={
            200: CategorySerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request, category_id: int):
        self.log.debug("Fetching category detail", category_id=category_id)
        dto = self.service.find_by_id(category_id)
        return Response(CategorySerializer(dto).data)
