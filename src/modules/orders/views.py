"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.  Domain
exceptions propagate to ``modules.core.exception_handler``.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.api import mutation_response, request_payload
from modules.core.pagination import StandardResultsSetPagination
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.orders.dtos import (
    ChangeStatusDTO,
    CreateOrderDTO,
    ReplaceOrderDTO,
    UpdateOrderDTO,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import OrderListSerializer, OrderSerializer
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    queryset = Order.objects.all()
    filterset_class = OrderFilter
    search_fields = ["order_number", "customer__name", "location"]
    ordering_fields = ["created_at", "order_number", "status", "delivery_due"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            customer_repository=CustomerDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )

    def get_throttles(self) -> list[BaseThrottle]:
        """Per-action throttling scopes."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Supports idempotency via the ``Idempotency-Key`` header.
        Returns 201 for a new order, 200 when the request was merged into
        existing open orders or the key had already been used.
        """
        payload = request_payload(request)
        header_key = request.headers.get("Idempotency-Key")
        if header_key:
            payload["idempotency_key"] = header_key
        dto = CreateOrderDTO.model_validate(payload)

        outcome = self._service.create_order(dto, request.user)

        if not outcome.created:
            return Response(
                {
                    "message": "Products merged into existing open orders.",
                    "result": outcome.result,
                    "merged": outcome.merged,
                    "consolidatedOrders": outcome.consolidated_orders,
                    "skippedProducts": [str(pid) for pid in outcome.skipped_product_ids],
                },
                status=status.HTTP_200_OK,
            )
        return Response(
            {
                "message": "Order created.",
                "result": outcome.result,
                "data": OrderSerializer(outcome.order).data,
            },
            status=status.HTTP_200_OK if outcome.replayed else status.HTTP_201_CREATED,
        )

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def get_queryset(self):
        return self._service.list_orders()

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filtering (status, customer, date range, overdue, delivered) is
        handled by ``OrderFilter``; ordering by ``OrderingFilter``.
        Results are paginated.
        """
        queryset = self.filter_queryset(self.get_queryset())

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = OrderListSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        order = self._service.get_order(pk)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Lifecycle actions
    # ------------------------------------------------------------------

    @action(detail=True, methods=["patch"], url_path="status")
    def change_status(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/status/"""
        dto = ChangeStatusDTO.model_validate(request_payload(request))
        order = self._service.change_status(pk, dto.status, request.user)
        return mutation_response("Order status updated.", OrderSerializer(order).data)

    @action(detail=True, methods=["patch"])
    def deliver(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/deliver/"""
        order = self._service.mark_delivered(pk, request.user)
        return mutation_response(
            "Order marked as delivered.", OrderSerializer(order).data
        )

    @action(detail=True, methods=["patch"])
    def nullify(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/nullify/"""
        order = self._service.nullify_order(pk, request.user)
        return mutation_response("Order nullified.", OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/"""
        dto = UpdateOrderDTO.model_validate(request_payload(request))
        order = self._service.update_order(pk, dto, request.user)
        return mutation_response("Order updated.", OrderSerializer(order).data)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/ (administrators)"""
        dto = ReplaceOrderDTO.model_validate(request_payload(request))
        order = self._service.replace_order(pk, dto, request.user)
        return mutation_response("Order replaced.", OrderSerializer(order).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}/ (administrators; the order is nullified)"""
        order = self._service.delete_order(pk, request.user)
        return mutation_response("Order nullified.", OrderSerializer(order).data)
