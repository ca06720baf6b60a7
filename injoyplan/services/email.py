"""Transactional email clients and templates."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional
import logging

import aiohttp
from aiohttp import ClientTimeout
from jinja2 import Environment, FileSystemLoader, select_autoescape

from injoyplan.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class EmailMessage:
    """A rendered email ready to send."""
    to: str
    subject: str
    html: str
    sender: str
    reply_to: Optional[str] = None


class EmailDeliveryError(Exception):
    """Raised when the provider rejects or fails to accept a message."""


class EmailClient(ABC):
    """Abstract base class for email clients."""

    @abstractmethod
    async def send(self, message: EmailMessage) -> str:
        """
        Send a message.

        Args:
            message: Rendered message

        Returns:
            Provider message id

        Raises:
            EmailDeliveryError: If the provider does not accept the message
        """
        pass


class ResendEmailClient(EmailClient):
    """Resend HTTP API client."""

    API_URL = "https://api.resend.com/emails"

    def __init__(self, api_key: str):
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json"
        }

    async def send(self, message: EmailMessage) -> str:
        payload = {
            "from": message.sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        if message.reply_to:
            payload["reply_to"] = message.reply_to

        timeout = ClientTimeout(total=15)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(self.API_URL, headers=self.headers, json=payload) as resp:
                if resp.status not in (200, 201):
                    error_text = await resp.text()
                    raise EmailDeliveryError(f"Resend API error: {resp.status} - {error_text}")
                body = await resp.json()

        logger.info("Email '%s' sent to %s", message.subject, message.to)
        return body.get("id", "")


class MockEmailClient(EmailClient):
    """Keeps messages in memory instead of sending them."""

    def __init__(self):
        self.outbox: List[EmailMessage] = []

    async def send(self, message: EmailMessage) -> str:
        self.outbox.append(message)
        logger.info("Mock email '%s' queued for %s", message.subject, message.to)
        return f"mock-{len(self.outbox)}"


_mock_client: Optional[MockEmailClient] = None


def get_email_client() -> EmailClient:
    """
    Factory function to get the email client based on configuration.

    Returns:
        EmailClient instance
    """
    global _mock_client
    provider = settings.email_provider.lower()

    if provider == "resend":
        if not settings.resend_api_key:
            raise ValueError("RESEND_API_KEY not set")
        return ResendEmailClient(api_key=settings.resend_api_key)

    elif provider == "mock":
        if _mock_client is None:
            _mock_client = MockEmailClient()
        return _mock_client

    else:
        raise ValueError(f"Unknown email provider: {provider}")


TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
)


def render_complaint_email(fields: Dict[str, object]) -> str:
    """Render the complaint notification. Values are autoescaped."""
    return templates.get_template("complaint_email.html").render(**fields)
