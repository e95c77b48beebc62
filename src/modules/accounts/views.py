"""User administration and current-user API views."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from modules.accounts.dtos import (
    ChangePasswordDTO,
    CreateUserDTO,
    ResetPasswordDTO,
    UpdateUserDTO,
)
from modules.accounts.models import User
from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.accounts.serializers import (
    ChangePasswordSerializer,
    CreateUserSerializer,
    ResetPasswordSerializer,
    UpdateUserSerializer,
    UserSerializer,
)
from modules.accounts.services import UserService


class UserViewSet(GenericViewSet):
    """Admin-only user management.  Users are deactivated, never deleted."""

    queryset = User.objects.all()
    serializer_class = UserSerializer
    filterset_fields = ["role", "is_active"]
    search_fields = ["username", "email", "first_name", "last_name"]
    ordering_fields = ["date_joined", "username"]
    ordering = ["-date_joined"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = UserService(repository=UserDjangoRepository())

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return User.objects.none()
        return self._service.list_users(self.request.user)

    def list(self, request: Request) -> Response:
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = UserSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        user = self._service.get_user(pk, request.user)
        return Response(UserSerializer(user).data)

    def create(self, request: Request) -> Response:
        serializer = CreateUserSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = self._service.create_user(
            CreateUserDTO(**serializer.validated_data), request.user
        )
        return Response(
            {"message": "User created.", "data": UserSerializer(user).data},
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        serializer = UpdateUserSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = self._service.update_user(
            pk, UpdateUserDTO(**serializer.validated_data), request.user
        )
        return Response({"message": "User updated.", "data": UserSerializer(user).data})

    def update(self, request: Request, pk: str | None = None) -> Response:
        return self.partial_update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        self._service.deactivate_user(pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["put"], url_path="reset-password")
    def reset_password(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/users/{id}/reset-password/

        ``new_password`` is optional; when omitted the response carries a
        generated ``temporary_password``.
        """
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user, generated = self._service.reset_password(
            pk, ResetPasswordDTO(**serializer.validated_data), request.user
        )
        data = {"user": UserSerializer(user).data}
        if generated:
            data["temporary_password"] = generated
        return Response({"message": "Password reset.", "data": data})


class MeView(APIView):
    """GET /api/v1/me/: the authenticated user's profile and role."""

    def get(self, request: Request) -> Response:
        return Response(UserSerializer(request.user).data)


class ChangePasswordView(APIView):
    """PUT /api/v1/me/password/"""

    def put(self, request: Request) -> Response:
        serializer = ChangePasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        UserService(repository=UserDjangoRepository()).change_password(
            ChangePasswordDTO(**serializer.validated_data), request.user
        )
        return Response({"message": "Password updated.", "data": None})
