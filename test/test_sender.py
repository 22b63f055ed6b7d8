import json
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from azure.servicebus import ServiceBusMessage, TransportType

from notification_api.config import load_settings
from notification_api.infra.servicebus_sender import QueueSender

CONN_STR = "Endpoint=sb://ns.servicebus.windows.net/;SharedAccessKeyName=k;SharedAccessKey=v"


@pytest.fixture
def sb(mocker):
    """Parchea ServiceBusClient y devuelve el sender falso."""
    sender = MagicMock()
    sender.__aenter__.return_value = sender
    sender.__aexit__.return_value = False
    sender.send_messages = AsyncMock()

    sb_client = MagicMock()
    sb_client.get_queue_sender.return_value = sender
    sb_client.close = AsyncMock()

    client_cls = mocker.patch("notification_api.infra.servicebus_sender.ServiceBusClient")
    client_cls.from_connection_string.return_value = sb_client
    return client_cls, sb_client, sender


@pytest.mark.asyncio
async def test_send_returns_message_id(sb):
    client_cls, sb_client, sb_sender = sb
    queue = QueueSender(CONN_STR, "notifications-queue")
    body = json.dumps({"type": "SYSTEM_ALERT", "userId": "u1"})

    message_id = await queue.send(body, {"NotificationType": "SYSTEM_ALERT", "Priority": "low"})

    sb_sender.send_messages.assert_awaited_once()
    message = sb_sender.send_messages.await_args.args[0]
    assert isinstance(message, ServiceBusMessage)
    assert message_id == message.message_id
    assert message.content_type == "application/json"
    assert message.subject == "SYSTEM_ALERT"
    assert message.application_properties["Priority"] == "low"
    assert json.loads(b"".join(message.body)) == {"type": "SYSTEM_ALERT", "userId": "u1"}

    client_cls.from_connection_string.assert_called_once_with(
        CONN_STR, transport_type=TransportType.AmqpOverWebsocket,
    )
    assert queue.status()["sent"] == 1
    assert queue.status()["lastSendAt"] is not None


@pytest.mark.asyncio
async def test_each_send_gets_its_own_message_id(sb):
    client_cls, sb_client, sb_sender = sb
    queue = QueueSender(CONN_STR, "notifications-queue")
    attributes = {"NotificationType": "SYSTEM_ALERT", "Priority": "normal"}

    first = await queue.send("{}", attributes)
    second = await queue.send("{}", attributes)

    assert first != second


@pytest.mark.asyncio
async def test_send_failure_is_recorded_and_raised(sb):
    client_cls, sb_client, sb_sender = sb
    sb_sender.send_messages.side_effect = RuntimeError("link detached")
    queue = QueueSender(CONN_STR, "notifications-queue")

    with pytest.raises(RuntimeError):
        await queue.send("{}", {"NotificationType": "SYSTEM_ALERT", "Priority": "normal"})

    status = queue.status()
    assert status["failed"] == 1
    assert "link detached" in status["lastError"]
    assert status["lastSendAt"] is None


@pytest.mark.asyncio
async def test_sends_share_one_client_with_a_sender_each(sb):
    client_cls, sb_client, sb_sender = sb
    queue = QueueSender(CONN_STR, "notifications-queue")
    attributes = {"NotificationType": "SYSTEM_ALERT", "Priority": "normal"}

    for _ in range(3):
        await queue.send("{}", attributes)

    client_cls.from_connection_string.assert_called_once()
    assert sb_client.get_queue_sender.call_count == 3
    assert sb_sender.send_messages.await_count == 3


@pytest.mark.asyncio
async def test_close_releases_the_client(sb):
    client_cls, sb_client, sb_sender = sb
    queue = QueueSender(CONN_STR, "notifications-queue")
    await queue.send("{}", {"NotificationType": "SYSTEM_ALERT", "Priority": "normal"})

    await queue.close()
    await queue.close()

    sb_client.close.assert_awaited_once()


def test_from_settings_uses_configured_transport():
    settings = load_settings({
        "AZURE_SERVICE_BUS_CONNECTION_STRING": CONN_STR,
        "AZURE_SERVICE_BUS_QUEUE_NAME": "q",
        "AZURE_SERVICE_BUS_TRANSPORT": "amqp",
    })

    queue = QueueSender.from_settings(settings)

    assert queue.transport_type == TransportType.Amqp
    assert queue.status()["queue"] == "q"
    assert queue.status()["hasConnectionString"] is True


@pytest.mark.asyncio
async def test_send_failure_is_left_to_the_caller_to_log(sb, caplog):
    client_cls, sb_client, sb_sender = sb
    sb_sender.send_messages.side_effect = RuntimeError("link detached")
    queue = QueueSender(CONN_STR, "notifications-queue")

    with caplog.at_level(logging.WARNING), pytest.raises(RuntimeError):
        await queue.send("{}", {"NotificationType": "SYSTEM_ALERT", "Priority": "normal"})

    assert caplog.records == []
