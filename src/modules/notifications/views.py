"""Notification settings API (administrators only).

The service enforces the access policy; domain exceptions propagate to
``modules.core.exception_handler``.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.core.api import mutation_response, request_payload
from modules.notifications.dtos import (
    CreateRecipientDTO,
    SendTestEmailDTO,
    UpdateConfigDTO,
    UpdateRecipientDTO,
)
from modules.notifications.serializers import (
    NotificationConfigSerializer,
    NotificationRecipientSerializer,
)
from modules.notifications.services import NotificationService


class NotificationViewSet(ViewSet):
    """``/notifications/config/`` and ``/notifications/test/``."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = NotificationService()

    @action(detail=False, methods=["get", "patch"])
    def config(self, request: Request) -> Response:
        """GET/PATCH /api/v1/notifications/config/"""
        if request.method == "GET":
            config = self._service.get_config(request.user)
            return Response(NotificationConfigSerializer(config).data)
        dto = UpdateConfigDTO.model_validate(request_payload(request))
        config = self._service.update_config(dto, request.user)
        return mutation_response(
            "Notification settings updated.",
            NotificationConfigSerializer(config).data,
        )

    @action(detail=False, methods=["post"])
    def test(self, request: Request) -> Response:
        """POST /api/v1/notifications/test/"""
        dto = SendTestEmailDTO.model_validate(request_payload(request))
        self._service.send_test_email(dto.email, request.user)
        return Response({"message": f"Test e-mail sent to {dto.email}."})


class NotificationRecipientViewSet(ViewSet):
    """CRUD on ``/notifications/recipients/``."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = NotificationService()

    def list(self, request: Request) -> Response:
        recipients = self._service.list_recipients(request.user)
        return Response(NotificationRecipientSerializer(recipients, many=True).data)

    def create(self, request: Request) -> Response:
        dto = CreateRecipientDTO.model_validate(request_payload(request))
        recipient = self._service.add_recipient(dto, request.user)
        return mutation_response(
            "Recipient added.",
            NotificationRecipientSerializer(recipient).data,
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        dto = UpdateRecipientDTO.model_validate(request_payload(request))
        recipient = self._service.update_recipient(pk, dto, request.user)
        return mutation_response(
            "Recipient updated.", NotificationRecipientSerializer(recipient).data
        )

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        self._service.remove_recipient(pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)
