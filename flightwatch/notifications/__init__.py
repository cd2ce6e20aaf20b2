# Notifications module - safety alert payloads and webhook delivery
from .alerts import (
    WebhookAlertDispatcher,
    AlertPayload,
    build_alert_payload,
    unique_issues,
    SAFETY_ALERT,
)

__all__ = [
    "WebhookAlertDispatcher",
    "AlertPayload",
    "build_alert_payload",
    "unique_issues",
    "SAFETY_ALERT",
]
