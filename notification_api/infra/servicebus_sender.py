# notification_api/infra/servicebus_sender.py
import logging
import uuid
from typing import Dict, Optional

from azure.servicebus import ServiceBusMessage, TransportType
from azure.servicebus.aio import ServiceBusClient

from notification_api.config import Settings
from notification_api.models.queue_message import utc_now_iso

logger = logging.getLogger(__name__)

TRANSPORT_TYPES = {
    "websocket": TransportType.AmqpOverWebsocket,  # 443, funciona en App Service
    "amqp": TransportType.Amqp,
}


class QueueSender:
    """
    Productor de Azure Service Bus.
    Un envío = un mensaje. No reintenta, no ordena, no deduplica:
    los timeouts son los del SDK.
    """

    def __init__(self, conn_str: str, queue_name: str, transport: str = "websocket"):
        self.conn_str = conn_str
        self.queue_name = queue_name
        self.transport_type = TRANSPORT_TYPES[transport]
        self._status = {
            "startedAt": utc_now_iso(),
            "lastSendAt": None,
            "lastError": None,
            "sent": 0,
            "failed": 0,
        }
        self._client: Optional[ServiceBusClient] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "QueueSender":
        return cls(settings.sb_conn_str, settings.sb_queue, settings.sb_transport)

    def _get_client(self) -> ServiceBusClient:
        # un solo cliente (una conexión AMQP) para todo el proceso
        if self._client is None:
            self._client = ServiceBusClient.from_connection_string(
                self.conn_str,
                transport_type=self.transport_type,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def send(self, body: str, attributes: Dict[str, str]) -> Optional[str]:
        """
        Envía `body` (JSON) a la cola con `attributes` como
        application_properties. Devuelve el MessageId del mensaje aceptado.
        """
        message = ServiceBusMessage(
            body,
            message_id=str(uuid.uuid4()),
            content_type="application/json",
            subject=attributes.get("NotificationType"),
            application_properties=attributes,
        )

        # sender propio por envío: los senders del SDK no se comparten entre corutinas
        try:
            sender = self._get_client().get_queue_sender(queue_name=self.queue_name)
            async with sender:
                await sender.send_messages(message)
        except Exception as e:
            self._status["failed"] += 1
            self._status["lastError"] = f"{type(e).__name__}: {e}"
            raise

        self._status["sent"] += 1
        self._status["lastSendAt"] = utc_now_iso()
        logger.debug("[sender] sent %s to %s", message.message_id, self.queue_name)
        return message.message_id

    def status(self) -> dict:
        return {
            **self._status,
            "queue": self.queue_name,
            "hasConnectionString": bool(self.conn_str),
        }
