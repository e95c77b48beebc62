"""Integration tests for the Celery configuration."""

import pytest

from modules.core.models import EventStatus, OutboxEvent

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _celery_eager(settings):
    """Run tasks synchronously in the test process."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


class TestCeleryConfig:
    def test_celery_app_is_importable(self):
        from config.celery import app

        assert app.main == "pedidos"

    def test_celery_app_exported_from_init(self):
        from config import celery_app

        assert celery_app.main == "pedidos"

    def test_celery_serializer_is_json(self, settings):
        assert settings.CELERY_TASK_SERIALIZER == "json"
        assert settings.CELERY_RESULT_SERIALIZER == "json"
        assert settings.CELERY_ACCEPT_CONTENT == ["json"]

    def test_celery_timezone_matches_django(self, settings):
        assert settings.CELERY_TIMEZONE == settings.TIME_ZONE

    def test_outbox_drain_is_scheduled(self, settings):
        tasks = {entry["task"] for entry in settings.CELERY_BEAT_SCHEDULE.values()}
        assert "core.drain_outbox" in tasks


class TestDrainOutboxTask:
    def test_empty_outbox(self):
        from modules.core.tasks import drain_outbox

        result = drain_outbox.delay()

        assert result.successful()
        assert result.result == {"published": 0, "failed": 0}

    def test_publishes_order_events(self, make_order):
        from modules.core.tasks import drain_outbox

        make_order()

        output = drain_outbox()

        assert output["published"] == 1
        assert not OutboxEvent.objects.filter(status=EventStatus.PENDING).exists()
