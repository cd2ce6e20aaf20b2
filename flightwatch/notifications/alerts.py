# flightwatch/notifications/alerts.py
"""
Safety alert delivery - POSTs a SAFETY_ALERT payload to a webhook when a
flight needs rescheduling.

Email/SMS rendering lives behind the webhook receiver.
"""

import httpx
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..logging import get_logger
from ..safety import Checkpoint, PathVerdict, ScheduledFlight
from ..safety.assessor import ACCEPTABLE_REASON
from ..settings import Settings, settings as default_settings

logger = get_logger(__name__)

SAFETY_ALERT = "SAFETY_ALERT"


@dataclass
class AlertPayload:
    """Standard alert payload structure."""
    event_id: str
    event_type: str
    timestamp: str
    flight_id: str
    data: Dict[str, Any]


def unique_issues(checkpoints: List[Checkpoint]) -> List[str]:
    """Distinct checkpoint reasons, in route order, excluding acceptable ones."""
    issues: List[str] = []
    for checkpoint in checkpoints:
        if checkpoint.reason and checkpoint.reason != ACCEPTABLE_REASON and checkpoint.reason not in issues:
            issues.append(checkpoint.reason)
    return issues


def _code(location: Any) -> Optional[str]:
    return getattr(location, "code", None)


def build_alert_payload(
    flight: ScheduledFlight,
    verdict: PathVerdict,
    checkpoints: List[Checkpoint],
) -> AlertPayload:
    """Build the SAFETY_ALERT payload for a flight."""
    scheduled = flight.scheduled_time
    return AlertPayload(
        event_id=str(uuid4()),
        event_type=SAFETY_ALERT,
        timestamp=datetime.now(timezone.utc).isoformat(),
        flight_id=flight.id,
        data={
            "user_id": flight.user_id,
            "student_name": flight.student_name,
            "training_level": flight.training_level,
            "departure": _code(flight.departure),
            "arrival": _code(flight.arrival),
            "scheduled_time": scheduled.isoformat() if scheduled else None,
            "safety_status": verdict.status.value,
            "safety_score": round(verdict.score, 1),
            "color": verdict.color.value,
            "issues": unique_issues(checkpoints),
            "checkpoint_count": len(checkpoints),
        },
    )


class WebhookAlertDispatcher:
    """
    Sends safety alerts to the configured webhook.

    Implements ``send_safety_alert(flight, verdict, checkpoints) -> bool``.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        settings: Optional[Settings] = None,
        client: Optional[httpx.Client] = None,
    ):
        settings = settings or default_settings
        self.url = url or settings.alert_webhook_url
        self.timeout = timeout_seconds or settings.alert_webhook_timeout_seconds
        self.client = client or httpx.Client(timeout=self.timeout)

    def send_safety_alert(
        self,
        flight: ScheduledFlight,
        verdict: PathVerdict,
        checkpoints: List[Checkpoint],
    ) -> bool:
        """
        Deliver a SAFETY_ALERT.

        Returns:
            True if the webhook answered 2xx; False if not configured or
            delivery failed
        """
        if not self.url:
            logger.warning("alert_webhook_not_configured", flight_id=flight.id)
            return False

        payload = build_alert_payload(flight, verdict, checkpoints)
        headers = {
            "Content-Type": "application/json",
            "User-Agent": "FlightWatch/1.0",
            "X-Webhook-Event": payload.event_type,
            "X-Webhook-Delivery-ID": payload.event_id,
        }

        try:
            logger.info(
                "alert_delivery_attempt",
                flight_id=flight.id,
                url=self.url,
                color=verdict.color.value,
            )
            response = self.client.post(self.url, json=asdict(payload), headers=headers)
        except httpx.TimeoutException as e:
            logger.warning("alert_delivery_timeout", flight_id=flight.id, error=str(e))
            return False
        except httpx.HTTPError as e:
            logger.error("alert_delivery_error", flight_id=flight.id, error=str(e))
            return False

        success = 200 <= response.status_code < 300
        logger.info(
            "alert_delivery_complete",
            flight_id=flight.id,
            status_code=response.status_code,
            success=success,
        )
        return success

    def close(self):
        self.client.close()
