"""
Failure notifications for the PDF service.

The API layer publishes a FailureEvent after it has classified an error;
subscribers (Slack, tests, ...) receive it outside the request path.
Delivery failures are logged and never raised to the publisher.
"""

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx


logger = logging.getLogger(__name__)

Subscriber = Callable[["FailureEvent"], Awaitable[Any]]


@dataclass
class FailureEvent:
    """A failed render request"""
    correlation_id: str
    endpoint: str
    environment: str
    error_type: str
    message: str
    stack_trace: str = ""
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class FailureNotifier:
    """Registry of failure subscribers"""

    def __init__(self):
        self._subscribers: List[Subscriber] = []

    @property
    def subscribers(self) -> List[Subscriber]:
        return list(self._subscribers)

    def subscribe(self, subscriber: Subscriber) -> None:
        if subscriber not in self._subscribers:
            self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: Subscriber) -> None:
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)

    async def publish(self, event: FailureEvent) -> None:
        """Deliver an event to every subscriber concurrently."""
        if not self._subscribers:
            return

        results = await asyncio.gather(
            *(subscriber(event) for subscriber in self._subscribers),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                logger.warning(f"Failure notification for {event.correlation_id} not delivered: {result}")


def format_slack_message(event: FailureEvent) -> Dict[str, Any]:
    """Slack incoming-webhook payload for a failure event."""
    trace = event.stack_trace[-2500:] if event.stack_trace else "n/a"
    return {
        "text": f":rotating_light: PDF generation failed ({event.environment})",
        "blocks": [
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": (
                        f"*PDF generation failed* on `{event.endpoint}`\n"
                        f"*Environment:* {event.environment}\n"
                        f"*Correlation ID:* `{event.correlation_id}`\n"
                        f"*Error:* {event.error_type}: {event.message}\n"
                        f"*Time:* {event.timestamp}"
                    ),
                },
            },
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": f"```{trace}```"},
            },
        ],
    }


async def send_slack_alert(
    url: str,
    payload: Dict[str, Any],
    max_retries: int = 3,
    timeout: float = 10.0,
    backoff_base: float = 1.0,
) -> bool:
    """Post to a Slack webhook with retry on server and network errors"""
    for attempt in range(max_retries):
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.post(url, json=payload)
            if response.status_code in (200, 201, 202, 204):
                return True
            # Don't retry on client errors (4xx)
            if response.status_code < 500:
                logger.warning(f"Slack webhook rejected alert: HTTP {response.status_code}")
                return False
        except (httpx.RequestError, httpx.TimeoutException) as e:
            logger.warning(f"Slack webhook attempt {attempt + 1} failed: {e}")

        if attempt < max_retries - 1:
            await asyncio.sleep(backoff_base * (2 ** attempt))
    return False


class SlackSubscriber:
    """Sends failure events to a Slack incoming webhook"""

    def __init__(self, webhook_url: str, max_retries: int = 3):
        self.webhook_url = webhook_url
        self.max_retries = max_retries

    async def __call__(self, event: FailureEvent) -> bool:
        delivered = await send_slack_alert(
            self.webhook_url, format_slack_message(event), max_retries=self.max_retries
        )
        if not delivered:
            logger.error(f"Slack alert for {event.correlation_id} could not be delivered")
        return delivered


def build_default_notifier(slack_webhook_url: Optional[str] = None) -> FailureNotifier:
    """Notifier with a Slack subscriber when a webhook URL is configured."""
    notifier = FailureNotifier()
    if slack_webhook_url:
        notifier.subscribe(SlackSubscriber(slack_webhook_url))
    else:
        logger.info("Slack webhook not configured; failure alerts are only logged")
    return notifier
