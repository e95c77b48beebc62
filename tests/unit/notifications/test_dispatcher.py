"""Unit tests for the concurrent e-mail dispatcher."""

import pytest

from modules.notifications.dispatcher import (
    NotificationDispatcher,
    Recipient,
    RenderedEmail,
    build_email_message,
)

pytestmark = pytest.mark.unit

EMAIL = RenderedEmail(subject="Asunto", text_body="texto", html_body="<p>html</p>")


def _recipients(*addresses):
    return [Recipient(email=a, name=a.split("@")[0]) for a in addresses]


class TestBuildEmailMessage:
    def test_text_body_with_html_alternative(self, settings):
        message = build_email_message(EMAIL, Recipient(email="a@x.cl", name="A"))

        assert message.to == ["a@x.cl"]
        assert message.subject == "Asunto"
        assert message.body == "texto"
        assert message.from_email == settings.DEFAULT_FROM_EMAIL
        assert message.alternatives[0][0] == "<p>html</p>"
        assert message.alternatives[0][1] == "text/html"


class TestDispatch:
    def test_one_message_per_recipient(self, mailoutbox):
        summary = NotificationDispatcher(max_workers=2).dispatch(
            EMAIL, _recipients("a@x.cl", "b@x.cl", "c@x.cl")
        )

        assert summary.sent == 3
        assert summary.failed == 0
        assert summary.total_configured == 3
        assert sorted(m.to[0] for m in mailoutbox) == ["a@x.cl", "b@x.cl", "c@x.cl"]

    def test_partial_failure_is_counted_not_raised(self, mailoutbox):
        def build(email, recipient):
            if recipient.email == "bad@x.cl":
                raise ConnectionError("smtp refused")
            return build_email_message(email, recipient)

        dispatcher = NotificationDispatcher(max_workers=3, build_message=build)
        summary = dispatcher.dispatch(
            EMAIL, _recipients("a@x.cl", "bad@x.cl", "c@x.cl"), total_configured=5
        )

        assert summary.sent == 2
        assert summary.failed == 1
        assert summary.total_configured == 5
        assert len(mailoutbox) == 2

    def test_no_recipients(self, mailoutbox):
        summary = NotificationDispatcher().dispatch(EMAIL, [], total_configured=2)

        assert (summary.sent, summary.failed, summary.total_configured) == (0, 0, 2)
        assert mailoutbox == []
