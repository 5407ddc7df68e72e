"""Client notification dispatch (fire-and-forget).

A dispatch failure is logged and dropped: it must never fail the request that
triggered it.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from crm.core.settings import Settings, get_settings


logger = logging.getLogger(__name__)


class NotificationDispatcher(Protocol):
    def notify(self, email: str, message: str) -> None: ...


def stamped(message: str, *, now: Optional[datetime] = None) -> str:
    """Append the event timestamp, e.g. "Your profile was created successfully on 2025-01-01T10:00:00+00:00"."""
    moment = (now or datetime.now(tz=timezone.utc)).replace(microsecond=0)
    return f"{message} on {moment.isoformat()}"


class LoggingNotificationDispatcher:
    """Used when no queue is configured."""

    def notify(self, email: str, message: str) -> None:
        logger.info("Notification not queued (no queue configured): %s", message)


class SqsNotificationDispatcher:
    """Publish notifications to a FIFO queue consumed by the email sender."""

    def __init__(
        self,
        queue_url: str,
        *,
        message_group: str = "client-account",
        client: Any = None,
        region: Optional[str] = None,
    ) -> None:
        self.queue_url = queue_url
        self.message_group = message_group
        self.region = region
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = boto3.client("sqs", region_name=self.region)
        return self._client

    def notify(self, email: str, message: str) -> None:
        try:
            self._get_client().send_message(
                QueueUrl=self.queue_url,
                MessageBody=message,
                MessageGroupId=self.message_group,
                MessageDeduplicationId=str(uuid.uuid4()),
                MessageAttributes={
                    "clientEmail": {"DataType": "String", "StringValue": email},
                },
            )
        except (ClientError, BotoCoreError) as e:
            # best-effort: the enclosing request has already succeeded
            logger.warning("Notification dispatch failed: %s", e)


def build_dispatcher(settings: Optional[Settings] = None) -> NotificationDispatcher:
    settings = settings or get_settings()
    if not settings.sqs_queue_url:
        return LoggingNotificationDispatcher()
    return SqsNotificationDispatcher(
        settings.sqs_queue_url,
        message_group=settings.sqs_message_group,
        region=settings.aws_region,
    )
