"""Product API views.

Exposes the ``ProductService`` via HTTP using DRF ViewSets.  Domain
exceptions propagate to ``modules.core.exception_handler``.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.api import mutation_response, request_payload
from modules.products.dtos import AdjustStockDTO, CreateProductDTO, UpdateProductDTO
from modules.products.filters import ProductFilter
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer
from modules.products.services import ProductService


class ProductViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for Product operations.

    Uses ``ProductService`` with ``ProductDjangoRepository`` (DIP).
    Reads are open to every authenticated role; the service enforces the
    access policy on writes.
    """

    filterset_class = ProductFilter
    search_fields = ["name", "sku", "brand", "description"]
    ordering_fields = ["name", "unit_price", "stock_current", "created_at"]
    ordering = ["name", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Product.objects.all()
    serializer_class = ProductSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def get_queryset(self):
        return self._service.list_products()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        product = self._service.get_product(pk)
        return Response(ProductSerializer(product).data)

    @action(detail=False, methods=["get"])
    def categories(self, request: Request) -> Response:
        """GET /api/v1/products/categories/"""
        return Response({"data": self._service.list_categories()})

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        dto = CreateProductDTO.model_validate(request_payload(request))
        product = self._service.create_product(dto, request.user)
        return mutation_response(
            "Product created.",
            ProductSerializer(product).data,
            status=status.HTTP_201_CREATED,
        )

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/products/{pk}/"""
        dto = UpdateProductDTO.model_validate(request_payload(request))
        product = self._service.update_product(pk, dto, request.user)
        return mutation_response("Product updated.", ProductSerializer(product).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/"""
        return self.update(request, pk)

    @action(detail=True, methods=["patch"], url_path="stock")
    def update_stock(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/stock/

        Accepts ``{"current": N}`` and/or ``{"min_stock": N}``.
        """
        dto = AdjustStockDTO.model_validate(request_payload(request))
        product = self._service.adjust_stock(pk, dto, request.user)
        return mutation_response("Stock updated.", ProductSerializer(product).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/ (soft delete)"""
        self._service.delete_product(pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)
