# notification_api/rpc/notification.py
from typing import List

from notification_api.models.notification import (
    BatchEnqueueResult,
    EnqueueResult,
    NotificationBatch,
    NotificationRequest,
)
from notification_api.rpc.core import Context, ProcedureError, procedure
from notification_api.services.notification_dispatch import (
    EnqueueError,
    enqueue_batch,
    enqueue_notification,
)


@procedure("mutation", input=NotificationRequest, protected=True)
async def enqueue(input: NotificationRequest, ctx: Context) -> EnqueueResult:
    try:
        return await enqueue_notification(input, ctx.session.user.id, ctx.queue)
    except EnqueueError:
        raise ProcedureError("INTERNAL_SERVER_ERROR", "Failed to enqueue notification")


@procedure("mutation", input=NotificationBatch, protected=True)
async def batch_enqueue(input: List[NotificationRequest], ctx: Context) -> BatchEnqueueResult:
    return await enqueue_batch(input, ctx.session.user.id, ctx.queue)


notification_router = {
    "enqueue": enqueue,
    "batchEnqueue": batch_enqueue,
}
