# notification_api/models/notification.py
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

MAX_BATCH_SIZE = 10


class NotificationType(str, Enum):
    COMMENT_REPLY = "COMMENT_REPLY"
    POST_MENTION = "POST_MENTION"
    DIRECT_MESSAGE = "DIRECT_MESSAGE"
    SYSTEM_ALERT = "SYSTEM_ALERT"


class Priority(str, Enum):
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


class NotificationRequest(BaseModel):
    """Lo que manda el cliente por cada destinatario."""
    type: NotificationType
    userId: str
    title: str
    body: str
    metadata: Optional[Dict[str, Any]] = None
    priority: Priority = Priority.NORMAL


# lote: como máximo 10 notificaciones por llamada
NotificationBatch = Annotated[
    List[NotificationRequest], Field(max_length=MAX_BATCH_SIZE)
]


class EnqueueResult(BaseModel):
    success: bool
    messageId: Optional[str] = None
    timestamp: Optional[str] = None
    error: Optional[str] = None


class BatchItemResult(BaseModel):
    status: Literal["fulfilled", "rejected"]
    messageId: Optional[str] = None
    error: Optional[str] = None


class BatchEnqueueResult(BaseModel):
    success: bool
    results: List[BatchItemResult]
