"""Transactional email delivery for ExecuTask."""

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

import requests
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class EmailDeliveryError(Exception):
    """The email provider rejected or could not be reached for a message."""
    pass


class EmailSender(ABC):
    """Sends one rendered message to one recipient."""

    @abstractmethod
    def send(self, recipient: str, subject: str, body: str) -> None:
        """Deliver a message. Raises EmailDeliveryError on failure."""
        pass


class ResendEmailSender(EmailSender):
    """Client for the Resend email API."""

    def __init__(self, api_key: Optional[str] = None, sender: Optional[str] = None):
        """Initialize Resend client.

        Args:
            api_key: Resend API key. If None, reads from RESEND_API_KEY env var.
            sender: From address. If None, reads from EMAIL_FROM env var.
        """
        self.api_key = api_key or os.getenv("RESEND_API_KEY")
        if not self.api_key:
            raise ValueError("Resend API key is required. Set RESEND_API_KEY env var.")
        self.sender = sender or os.getenv("EMAIL_FROM", "ExecuTask <noreply@executask.app>")
        self.headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def send(self, recipient: str, subject: str, body: str) -> None:
        payload = {
            "from": self.sender,
            "to": [recipient],
            "subject": subject,
            "text": body,
        }
        try:
            response = requests.post(RESEND_API_URL, headers=self.headers, json=payload, timeout=10)
            response.raise_for_status()
        except requests.RequestException as e:
            raise EmailDeliveryError(f"Failed to send email via Resend: {e}") from e
        logger.info(f"Sent email '{subject}' (id={response.json().get('id')})")


class LogEmailSender(EmailSender):
    """Writes messages to the log instead of sending them (development)."""

    def send(self, recipient: str, subject: str, body: str) -> None:
        logger.info(f"[EMAIL] to={recipient} subject={subject!r}\n{body}")


def build_email_sender() -> EmailSender:
    """Email sender selected by the EMAIL_BACKEND env var."""
    backend = os.getenv("EMAIL_BACKEND", "log")
    if backend == "resend":
        return ResendEmailSender()
    if backend == "log":
        return LogEmailSender()
    raise ValueError(f"Unknown EMAIL_BACKEND: {backend}")
