"""Concurrent e-mail fan-out.

One message per enabled recipient; every send is attempted independently
on a thread pool and all of them run to completion.  A failed send is
logged and counted, never raised: a notification problem must not fail the
operation that triggered it.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

import structlog
from django.conf import settings
from django.core.mail import EmailMultiAlternatives

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Recipient:
    email: str
    name: str


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    text_body: str
    html_body: str


@dataclass(frozen=True)
class DispatchSummary:
    sent: int
    failed: int
    total_configured: int


class NotificationDispatcher:
    """Sends one rendered e-mail to many recipients in parallel.

    ``build_message`` is injectable so tests can substitute a failing or
    recording message factory.
    """

    def __init__(
        self,
        max_workers: Optional[int] = None,
        build_message: Optional[Callable[[RenderedEmail, Recipient], EmailMultiAlternatives]] = None,
    ) -> None:
        self._max_workers = max_workers or settings.NOTIFICATIONS_MAX_WORKERS
        self._build_message = build_message or build_email_message

    def dispatch(
        self,
        email: RenderedEmail,
        recipients: Iterable[Recipient],
        total_configured: Optional[int] = None,
    ) -> DispatchSummary:
        targets: List[Recipient] = list(recipients)
        configured = total_configured if total_configured is not None else len(targets)
        if not targets:
            logger.info("notification.no_recipients", subject=email.subject)
            return DispatchSummary(sent=0, failed=0, total_configured=configured)

        sent = failed = 0
        workers = max(1, min(self._max_workers, len(targets)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(self._send, email, r): r for r in targets}
            for future in as_completed(futures):
                recipient = futures[future]
                try:
                    future.result()
                except Exception as exc:
                    failed += 1
                    logger.warning(
                        "notification.failed",
                        recipient=recipient.email,
                        subject=email.subject,
                        error=str(exc),
                    )
                else:
                    sent += 1
                    logger.info(
                        "notification.sent",
                        recipient=recipient.email,
                        subject=email.subject,
                    )

        summary = DispatchSummary(sent=sent, failed=failed, total_configured=configured)
        logger.info(
            "notification.dispatched",
            subject=email.subject,
            sent=summary.sent,
            failed=summary.failed,
            total_configured=summary.total_configured,
        )
        return summary

    def _send(self, email: RenderedEmail, recipient: Recipient) -> int:
        return self._build_message(email, recipient).send(fail_silently=False)


def build_email_message(email: RenderedEmail, recipient: Recipient) -> EmailMultiAlternatives:
    message = EmailMultiAlternatives(
        subject=email.subject,
        body=email.text_body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[recipient.email],
    )
    message.attach_alternative(email.html_body, "text/html")
    return message
