# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: team event notifications posted to the notification-service.
Without a configured URL events are only logged.
"""

from typing import Any, Optional

import httpx

from team_engine.core.config import settings
from team_engine.core.logging import get_logger
from team_engine.metrics import NOTIFICATIONS_SENT
from team_engine.models.domain import NotificationEvent

logger = get_logger(__name__)


class NotificationClient:
    """Fire-and-forget notification sender via notification-service."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self._base_url = settings.NOTIFICATION_SERVICE_URL if base_url is None else base_url
        self._timeout = timeout or settings.NOTIFICATION_TIMEOUT

    def notify(
        self,
        team_id: str,
        event: NotificationEvent,
        payload: Optional[dict[str, Any]] = None,
    ) -> None:
        """Send a notification. Failures are logged but never raised."""
        event_name = NotificationEvent(event).value
        if not self._base_url:
            NOTIFICATIONS_SENT.labels(event=event_name, outcome="logged").inc()
            logger.info("Notification (log only): team=%s, event=%s", team_id, event_name)
            return
        try:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.post(
                    f"{self._base_url}/api/v1/notify",
                    json={
                        "team_id": team_id,
                        "event": event_name,
                        "payload": payload or {},
                    },
                )
            NOTIFICATIONS_SENT.labels(event=event_name, outcome="sent").inc()
            logger.info(
                "Notification sent: team=%s, event=%s, status=%d",
                team_id,
                event_name,
                resp.status_code,
            )
        except Exception as exc:
            NOTIFICATIONS_SENT.labels(event=event_name, outcome="failed").inc()
            logger.warning("Notification failed: team=%s, event=%s: %s", team_id, event_name, exc)
