"""
Trade notification sinks.

Notifiers are fire-and-forget: a failed delivery is logged and reported
as False, never raised into the caller.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import httpx

from stocksignal.config import settings

logger = logging.getLogger(__name__)

DISCORD_CONTENT_LIMIT = 2000


class TradeNotifier(ABC):
    """Abstract base class for trade notification sinks."""

    @abstractmethod
    def notify(self, message: str) -> bool:
        """Deliver a message. Returns True if successful."""
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """Check if the sink is properly configured."""
        pass


class LoggingNotifier(TradeNotifier):
    """Writes notifications to the application log."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def is_configured(self) -> bool:
        return True

    def notify(self, message: str) -> bool:
        logger.log(self.level, message)
        return True


class DiscordNotifier(TradeNotifier):
    """Discord webhook notifier."""

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.webhook_url = webhook_url or settings.discord_webhook_url
        self.timeout = timeout
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.webhook_url)

    def notify(self, message: str) -> bool:
        if not self.is_configured():
            logger.warning("Discord webhook URL not configured")
            return False

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(
                    self.webhook_url,
                    json={"content": message[:DISCORD_CONTENT_LIMIT]},
                )

            # Discord answers 204 No Content on success
            if response.status_code in (200, 204):
                logger.debug("Discord notification sent")
                return True
            logger.error(f"Discord notification failed: {response.status_code}")
            return False

        except httpx.HTTPError as e:
            logger.error(f"Discord notification error: {e}")
            return False


class CompositeNotifier(TradeNotifier):
    """Fans a message out to several notifiers."""

    def __init__(self, notifiers: List[TradeNotifier]):
        self.notifiers = notifiers

    def is_configured(self) -> bool:
        return any(n.is_configured() for n in self.notifiers)

    def notify(self, message: str) -> bool:
        results = [n.notify(message) for n in self.notifiers if n.is_configured()]
        return bool(results) and all(results)


def build_notifier(webhook_url: Optional[str] = None) -> TradeNotifier:
    """Log sink, plus Discord when a webhook is configured."""
    discord = DiscordNotifier(webhook_url)
    if discord.is_configured():
        return CompositeNotifier([LoggingNotifier(), discord])
    return LoggingNotifier()
