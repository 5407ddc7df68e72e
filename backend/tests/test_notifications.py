from __future__ import annotations

import logging
from datetime import datetime, timezone

import boto3
from botocore.stub import ANY, Stubber

from crm.core.settings import Settings
from crm.services.notifications import (
    LoggingNotificationDispatcher,
    SqsNotificationDispatcher,
    build_dispatcher,
    stamped,
)


QUEUE = "https://sqs.ap-southeast-1.amazonaws.com/123456789012/client-notifications.fifo"


def _sqs():
    return boto3.client(
        "sqs",
        region_name="ap-southeast-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


def test_message_goes_to_fifo_queue_with_client_email():
    client = _sqs()
    with Stubber(client) as stubber:
        stubber.add_response(
            "send_message",
            {"MessageId": "m-1"},
            {
                "QueueUrl": QUEUE,
                "MessageBody": "Your profile was created successfully on 2025-01-01T10:00:00+00:00",
                "MessageGroupId": "client-account",
                "MessageDeduplicationId": ANY,
                "MessageAttributes": {"clientEmail": {"DataType": "String", "StringValue": "c@mail.test"}},
            },
        )
        SqsNotificationDispatcher(QUEUE, client=client).notify(
            "c@mail.test", "Your profile was created successfully on 2025-01-01T10:00:00+00:00"
        )
        stubber.assert_no_pending_responses()


def test_send_failure_is_logged_not_raised(caplog):
    client = _sqs()
    with Stubber(client) as stubber:
        stubber.add_client_error("send_message", service_error_code="AWS.SimpleQueueService.NonExistentQueue")
        with caplog.at_level(logging.WARNING, logger="crm.services.notifications"):
            SqsNotificationDispatcher(QUEUE, client=client).notify("c@mail.test", "hello")

    assert "Notification dispatch failed" in caplog.text


def test_timestamp_suffix():
    moment = datetime(2025, 1, 1, 10, 0, 0, 123456, tzinfo=timezone.utc)
    assert stamped("Your account was created successfully", now=moment) == (
        "Your account was created successfully on 2025-01-01T10:00:00+00:00"
    )


def test_dispatcher_selection_follows_queue_setting():
    assert isinstance(build_dispatcher(Settings()), LoggingNotificationDispatcher)
    assert isinstance(build_dispatcher(Settings(sqs_queue_url=QUEUE)), SqsNotificationDispatcher)
