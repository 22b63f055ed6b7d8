# notification_api/models/queue_message.py
from datetime import datetime, timezone

from notification_api.models.notification import NotificationRequest


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class QueueMessage(NotificationRequest):
    """
    Mensaje tal cual se escribe en la cola:
    la request del cliente + timestamp + quién lo envía.
    senderUserId sale SIEMPRE de la sesión, nunca del body.
    """
    timestamp: str
    senderUserId: str

    @classmethod
    def build(cls, request: NotificationRequest, sender_user_id: str) -> "QueueMessage":
        return cls(
            **request.model_dump(),
            timestamp=utc_now_iso(),
            senderUserId=sender_user_id,
        )

    def to_body(self) -> str:
        # metadata es opcional: si no vino, no se manda
        return self.model_dump_json(exclude_none=True)

    def attributes(self) -> dict:
        return {
            "NotificationType": self.type.value,
            "Priority": self.priority.value,
        }
