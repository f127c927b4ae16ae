# fleetscore/notify.py

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

logger = logging.getLogger(__name__)

REPORT_READY_SUBJECT = "Fleet health report is ready"


class Notifier(Protocol):
    def send(self, recipient: str, subject: str, body: str) -> None: ...


class LogNotifier:
    """Used when no SMTP host is configured."""

    def send(self, recipient: str, subject: str, body: str) -> None:
        logger.info("Notification for %s: %s - %s", recipient, subject, body)


class SmtpNotifier:

    def __init__(self, host: str, port: int = 25, sender: str = "fleetscore@localhost", timeout_s: float = 30.0):
        self.host = host
        self.port = port
        self.sender = sender
        self.timeout_s = timeout_s

    def send(self, recipient: str, subject: str, body: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.set_content(body)

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout_s) as smtp:
            smtp.send_message(msg)
        logger.info("Email sent to %s", recipient)
