# notification_api/services/notification_dispatch.py
import asyncio
import logging
from typing import List, Optional

from notification_api.infra.servicebus_sender import QueueSender
from notification_api.models.notification import (
    BatchEnqueueResult,
    BatchItemResult,
    EnqueueResult,
    NotificationRequest,
)
from notification_api.models.queue_message import QueueMessage

logger = logging.getLogger(__name__)


class EnqueueError(Exception):
    pass


async def _send(queue: QueueSender, message: QueueMessage) -> Optional[str]:
    return await queue.send(message.to_body(), message.attributes())


async def enqueue_notification(
    request: NotificationRequest,
    sender_user_id: str,
    queue: QueueSender,
) -> EnqueueResult:
    """
    Encola UNA notificación.
    Si la cola falla o no devuelve MessageId -> EnqueueError
    (el detalle queda en el log, no se le pasa al cliente).
    """
    message = QueueMessage.build(request, sender_user_id)

    try:
        message_id = await _send(queue, message)
    except Exception as e:
        logger.exception("[dispatch] Failed to enqueue notification for %s", request.userId)
        raise EnqueueError(str(e)) from e

    if not message_id:
        logger.error("[dispatch] Service Bus did not return a MessageId for %s", request.userId)
        raise EnqueueError("Service Bus did not return a MessageId")

    return EnqueueResult(
        success=True,
        messageId=message_id,
        timestamp=message.timestamp,
    )


async def enqueue_batch(
    requests: List[NotificationRequest],
    sender_user_id: str,
    queue: QueueSender,
) -> BatchEnqueueResult:
    """
    Encola un lote en paralelo y espera a que TODOS terminen.
    Un fallo no corta ni deshace los demás; el resultado mantiene el orden.
    """
    messages = [QueueMessage.build(r, sender_user_id) for r in requests]

    settled = await asyncio.gather(
        *(_send(queue, m) for m in messages),
        return_exceptions=True,
    )

    results = []
    for message, outcome in zip(messages, settled):
        if isinstance(outcome, BaseException):
            logger.error(
                "[dispatch] batch item for %s rejected: %s", message.userId, outcome
            )
            results.append(BatchItemResult(
                status="rejected",
                messageId=None,
                error=str(outcome) or type(outcome).__name__,
            ))
        else:
            results.append(BatchItemResult(
                status="fulfilled",
                messageId=outcome,
                error=None,
            ))

    return BatchEnqueueResult(success=True, results=results)
