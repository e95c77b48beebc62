"""Unit tests for NotificationService."""

import pytest

from modules.accounts.exceptions import Forbidden
from modules.accounts.models import Role
from modules.notifications.dispatcher import NotificationDispatcher
from modules.notifications.dtos import (
    CreateRecipientDTO,
    UpdateConfigDTO,
    UpdateRecipientDTO,
)
from modules.notifications.exceptions import (
    NotificationFailure,
    RecipientAlreadyExists,
    RecipientNotFound,
)
from modules.notifications.models import (
    NotificationConfig,
    NotificationRecipient,
    RecipientKind,
)
from modules.notifications.services import NotificationService

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return NotificationService(dispatcher=NotificationDispatcher(max_workers=2))


def _failing_dispatcher():
    def build(email, recipient):
        raise ConnectionError("smtp down")

    return NotificationDispatcher(max_workers=1, build_message=build)


class TestConfig:
    def test_load_creates_singleton_and_syncs_users(self, admin_user, vendedor):
        config = NotificationConfig.load()

        assert config.enabled is True
        assert config.notify_on_order_create is True
        assert config.notify_on_status_change is False
        assert config.notify_on_delivery is False
        assert set(NotificationRecipient.objects.values_list("email", flat=True)) == {
            admin_user.email,
            vendedor.email,
        }
        assert NotificationConfig.load().pk == config.pk

    def test_users_without_email_are_not_synced(self, django_user_model):
        django_user_model.objects.create_user(username="sinmail", password="x")
        NotificationConfig.load()
        assert NotificationRecipient.objects.count() == 0

    def test_update_only_supplied_toggles(self, service, admin_user):
        config = service.update_config(
            UpdateConfigDTO(notify_on_delivery=True), admin_user
        )

        assert config.notify_on_delivery is True
        assert config.notify_on_order_create is True
        assert config.updated_by == admin_user

    @pytest.mark.parametrize("actor", ["vendedor", "facturador"])
    def test_only_admin_manages_notifications(self, service, request, actor):
        user = request.getfixturevalue(actor)
        with pytest.raises(Forbidden):
            service.get_config(user)


class TestRecipients:
    def test_add_extra_recipient(self, service, admin_user):
        recipient = service.add_recipient(
            CreateRecipientDTO(email="bodega@empresa.cl", name="Bodega"), admin_user
        )
        assert recipient.kind == RecipientKind.EXTRA
        assert recipient.enabled is True

    def test_duplicate_email_is_case_insensitive(self, service, admin_user):
        service.add_recipient(
            CreateRecipientDTO(email="bodega@empresa.cl", name="Bodega"), admin_user
        )
        with pytest.raises(RecipientAlreadyExists):
            service.add_recipient(
                CreateRecipientDTO(email="BODEGA@empresa.cl", name="Otra"), admin_user
            )

    def test_disable_recipient(self, service, admin_user):
        recipient = service.add_recipient(
            CreateRecipientDTO(email="bodega@empresa.cl", name="Bodega"), admin_user
        )
        updated = service.update_recipient(
            str(recipient.id), UpdateRecipientDTO(enabled=False), admin_user
        )
        assert updated.enabled is False

    def test_remove_unknown_recipient(self, service, admin_user):
        with pytest.raises(RecipientNotFound):
            service.remove_recipient("not-a-uuid", admin_user)

    def test_list_includes_synced_users(self, service, admin_user):
        recipients = service.list_recipients(admin_user)
        assert [r.email for r in recipients] == [admin_user.email]


class TestTestEmail:
    def test_sends_configuration_check(self, service, admin_user, mailoutbox):
        service.send_test_email("ops@empresa.cl", admin_user)

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ["ops@empresa.cl"]

    def test_failure_is_raised(self, admin_user):
        service = NotificationService(dispatcher=_failing_dispatcher())
        with pytest.raises(NotificationFailure):
            service.send_test_email("ops@empresa.cl", admin_user)


class TestOrderNotifications:
    def test_order_created_goes_to_enabled_recipients(
        self, service, make_order, admin_user, mailoutbox
    ):
        order = make_order()
        NotificationConfig.load()
        NotificationRecipient.objects.create(
            email="off@empresa.cl", name="Off", enabled=False
        )

        summary = service.notify_order_created(order)

        # admin and vendedor were synced; the disabled extra is skipped.
        assert summary.sent == 2
        assert summary.total_configured == 3
        assert {m.to[0] for m in mailoutbox} == {admin_user.email, "vendedor@empresa.cl"}
        assert order.order_number in mailoutbox[0].subject

    def test_global_switch_disables_everything(self, service, make_order, mailoutbox):
        order = make_order()
        NotificationConfig.objects.create(enabled=False)

        assert service.notify_order_created(order) is None
        assert mailoutbox == []

    def test_status_change_is_off_by_default(self, service, make_order, mailoutbox):
        order = make_order()
        assert service.notify_status_changed(order, "pendiente", "compra") is None
        assert mailoutbox == []

    def test_delivery_when_toggled_on(self, service, make_order, mailoutbox):
        order = make_order()
        NotificationConfig.objects.create(notify_on_delivery=True)
        NotificationRecipient.objects.create(email="ops@empresa.cl", name="Ops")

        summary = service.notify_delivered(order)

        # vendedor placed the order and is registered on the first send.
        assert summary.sent == 2
        assert {m.to[0] for m in mailoutbox} == {"ops@empresa.cl", "vendedor@empresa.cl"}
        assert "entregado" in mailoutbox[0].subject

    def test_send_failures_never_raise(self, make_order):
        order = make_order()
        NotificationConfig.objects.create()
        NotificationRecipient.objects.create(email="ops@empresa.cl", name="Ops")

        summary = NotificationService(
            dispatcher=_failing_dispatcher()
        ).notify_order_created(order)

        assert summary.failed == 2
        assert summary.sent == 0


class TestUserRecipients:
    def test_users_created_after_setup_are_notified(
        self, service, make_order, vendedor, django_user_model, mailoutbox
    ):
        NotificationConfig.load()
        django_user_model.objects.create_user(
            username="admin2",
            email="admin2@empresa.cl",
            password="pass12345",
            role=Role.ADMIN,
        )

        summary = service.notify_order_created(make_order())

        assert summary.sent == 2
        assert {m.to[0] for m in mailoutbox} == {vendedor.email, "admin2@empresa.cl"}

    def test_deactivated_users_are_not_notified(
        self, service, make_order, admin_user, vendedor, mailoutbox
    ):
        NotificationConfig.load()
        order = make_order()
        vendedor.is_active = False
        vendedor.save()

        summary = service.notify_order_created(order)

        assert summary.sent == 1
        assert summary.total_configured == 1
        assert [m.to for m in mailoutbox] == [[admin_user.email]]

    def test_reactivated_user_keeps_their_recipient_row(self, vendedor):
        NotificationConfig.load()
        vendedor.is_active = False
        vendedor.save()
        NotificationConfig.load()
        vendedor.is_active = True
        vendedor.save()

        assert [r.email for r in NotificationRecipient.active()] == [vendedor.email]
        assert NotificationRecipient.objects.filter(user=vendedor).count() == 1

    def test_disabled_user_row_stays_disabled(self, service, make_order, vendedor, mailoutbox):
        NotificationConfig.load()
        NotificationRecipient.objects.filter(user=vendedor).update(enabled=False)

        summary = service.notify_order_created(make_order())

        assert summary.sent == 0
        assert mailoutbox == []

    def test_list_hides_deactivated_users(self, service, admin_user, vendedor):
        NotificationConfig.load()
        vendedor.is_active = False
        vendedor.save()

        assert [r.email for r in service.list_recipients(admin_user)] == [admin_user.email]
