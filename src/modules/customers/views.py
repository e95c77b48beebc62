"""Customer API views.

Exposes the ``CustomerService`` via HTTP using DRF ViewSets.  Domain
exceptions propagate to ``modules.core.exception_handler``.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.api import mutation_response, request_payload
from modules.customers.dtos import CreateCustomerDTO, UpdateCustomerDTO
from modules.customers.filters import CustomerFilter
from modules.customers.models import Customer
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.customers.serializers import CustomerSerializer
from modules.customers.services import CustomerService


class CustomerViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for Customer operations.

    Uses ``CustomerService`` with ``CustomerDjangoRepository`` (DIP).
    Reads are open to every authenticated role; the service enforces the
    access policy on writes.
    """

    filterset_class = CustomerFilter
    search_fields = ["name", "tax_id", "email"]
    ordering_fields = ["created_at", "name", "city"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Customer.objects.all()
    serializer_class = CustomerSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CustomerService(repository=CustomerDjangoRepository())

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def get_queryset(self):
        return self._service.list_customers()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/customers/{pk}/"""
        customer = self._service.get_customer(pk)
        return Response(CustomerSerializer(customer).data)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/customers/"""
        dto = CreateCustomerDTO.model_validate(request_payload(request))
        customer = self._service.create_customer(dto, request.user)
        return mutation_response(
            "Customer created.",
            CustomerSerializer(customer).data,
            status=status.HTTP_201_CREATED,
        )

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/customers/{pk}/"""
        dto = UpdateCustomerDTO.model_validate(request_payload(request))
        customer = self._service.update_customer(pk, dto, request.user)
        return mutation_response("Customer updated.", CustomerSerializer(customer).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/customers/{pk}/"""
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/customers/{pk}/ (soft delete)"""
        self._service.delete_customer(pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)
