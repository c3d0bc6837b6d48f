"""Out-of-band delivery of verification codes.

The transfer flow only needs "deliver this code to this address" with a
success or failure signal. Backends raise ``DeliveryError`` on any failure,
including timeouts.
"""

import logging
from typing import Protocol

import requests

logger = logging.getLogger(__name__)


class DeliveryError(Exception):
    """Raised when a code could not be handed to the delivery channel."""


class CodeDelivery(Protocol):
    def deliver(self, address: str, code: str) -> None:
        ...


def render_message(code: str, sender_name: str = "CPay") -> str:
    """Return the SMS body for a verification code."""
    return (
        f"Your {sender_name} verification code is: {code}. "
        "This code is valid for a short time."
    )


class LogCodeDelivery:
    """Development backend that writes the code to the log instead of sending it."""

    def __init__(self, sender_name: str = "CPay"):
        self.sender_name = sender_name

    def deliver(self, address: str, code: str) -> None:
        logger.info("Sending OTP %s to %s", code, address)


class HttpSmsDelivery:
    """Send codes through an HTTP SMS gateway.

    The gateway receives ``{"to": ..., "message": ...}`` as JSON with an
    ``api-key`` header and must answer with a 2xx status.
    """

    def __init__(
        self,
        gateway_url: str,
        api_key: str,
        timeout: float = 10.0,
        sender_name: str = "CPay",
        session: requests.Session | None = None,
    ):
        """Initialize the gateway backend.

        Args:
            gateway_url: Endpoint that accepts outbound SMS requests
            api_key: Credential sent in the ``api-key`` header
            timeout: Seconds to wait for the gateway before giving up
            sender_name: Brand shown in the message body
            session: Optional requests session (connection reuse, tests)
        """
        self.gateway_url = gateway_url
        self.api_key = api_key
        self.timeout = timeout
        self.sender_name = sender_name
        self.session = session or requests.Session()

    def deliver(self, address: str, code: str) -> None:
        payload = {"to": address, "message": render_message(code, self.sender_name)}
        try:
            resp = self.session.post(
                self.gateway_url,
                json=payload,
                headers={"api-key": self.api_key},
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.error("Failed to send SMS to %s: %s", address, e)
            raise DeliveryError(f"SMS gateway rejected message: {e}") from e
        logger.info("SMS sent to %s", address)


def create_delivery(settings) -> CodeDelivery:
    """Build the delivery backend selected in settings.

    Args:
        settings: ``cpay.config.DeliverySettings``
    """
    if settings.backend == "http":
        if not settings.gateway_url:
            raise ValueError("delivery.gateway_url is required for the http backend")
        return HttpSmsDelivery(
            gateway_url=settings.gateway_url,
            api_key=settings.api_key,
            timeout=settings.timeout_seconds,
            sender_name=settings.sender_name,
        )
    return LogCodeDelivery(sender_name=settings.sender_name)
