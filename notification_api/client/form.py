# notification_api/client/form.py
from dataclasses import dataclass
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from notification_api.client.mutation import ApiClient, TRPCClientError
from notification_api.models.notification import NotificationType, Priority

# mensajes que ve el usuario cuando falta un campo
REQUIRED_MESSAGES = {
    "userId": "User ID is required",
    "title": "Title is required",
    "body": "Message is required",
}

UNAUTHORIZED_MESSAGE = "You must be logged in to send notifications"


class NotificationFormValues(BaseModel):
    userId: str = Field("", min_length=1)
    title: str = Field("", min_length=1, max_length=100)
    body: str = Field("", min_length=1, max_length=500)
    priority: Priority = Priority.NORMAL


@dataclass
class Toast:
    kind: str  # "success" | "error"
    message: str


class NotificationCenter:
    """
    Formulario de envío de notificaciones.
    Modo simple: un userId. Modo lote: lista de destinatarios (chips).
    """

    def __init__(self, api: ApiClient, session: Optional[dict] = None):
        self.api = api
        self.session = session
        self.is_batch_mode = False
        self.recipients: List[str] = []
        self.values: Dict[str, str] = {}
        self.errors: Dict[str, str] = {}
        self.toasts: List[Toast] = []
        self.reset()

        api.notification.enqueue.on_success = self._sent_one
        api.notification.enqueue.on_error = self._failed_one
        api.notification.batch_enqueue.on_success = self._sent_batch
        api.notification.batch_enqueue.on_error = self._failed_batch

    # ---- estado ----
    @property
    def signed_in(self) -> bool:
        return bool(self.session)

    @property
    def notice(self) -> Optional[str]:
        if not self.signed_in:
            return "Please sign in to send notifications"
        return None

    @property
    def is_loading(self) -> bool:
        return (
            self.api.notification.enqueue.is_loading
            or self.api.notification.batch_enqueue.is_loading
        )

    @property
    def submit_disabled(self) -> bool:
        return self.is_loading

    @property
    def submit_label(self) -> str:
        return "Sending..." if self.is_loading else "Send Notification"

    @property
    def mode_label(self) -> str:
        return "Single Mode" if self.is_batch_mode else "Batch Mode"

    def reset(self) -> None:
        self.values = {"userId": "", "title": "", "body": "", "priority": Priority.NORMAL.value}
        self.errors = {}

    def set_field(self, name: str, value: str) -> None:
        if name not in self.values:
            raise KeyError(name)
        self.values[name] = value

    def toggle_batch_mode(self) -> None:
        self.is_batch_mode = not self.is_batch_mode
        self.recipients = []
        self.reset()

    # ---- destinatarios (modo lote) ----
    def add_recipient(self, value: str) -> bool:
        value = (value or "").strip()
        if not value or value in self.recipients:
            return False
        self.recipients.append(value)
        return True

    def remove_recipient(self, value: str) -> None:
        self.recipients = [r for r in self.recipients if r != value]

    def clear_recipients(self) -> None:
        self.recipients = []

    # ---- validación + envío ----
    def validate(self) -> Optional[NotificationFormValues]:
        values = dict(self.values)
        if self.is_batch_mode:
            # en modo lote el userId sale de los chips
            values["userId"] = "-"
        try:
            parsed = NotificationFormValues(**values)
        except ValidationError as e:
            self.errors = {}
            for err in e.errors():
                field = str(err["loc"][0])
                if err["type"] == "string_too_short":
                    self.errors[field] = REQUIRED_MESSAGES.get(field, err["msg"])
                else:
                    self.errors.setdefault(field, err["msg"])
            return None
        self.errors = {}
        return parsed

    async def submit(self) -> bool:
        """Devuelve True si se llamó a una mutation y salió bien."""
        if not self.signed_in or self.submit_disabled:
            return False

        data = self.validate()
        if data is None:
            return False

        payload = {
            "title": data.title,
            "body": data.body,
            "priority": data.priority.value,
            "type": NotificationType.SYSTEM_ALERT.value,
        }

        try:
            if self.is_batch_mode:
                if not self.recipients:
                    self.toasts.append(Toast("error", "Add at least one recipient"))
                    return False
                await self.api.notification.batch_enqueue.mutate(
                    [{**payload, "userId": r} for r in self.recipients]
                )
            else:
                await self.api.notification.enqueue.mutate({**payload, "userId": data.userId})
        except TRPCClientError:
            # el toast ya lo puso on_error
            return False
        return True

    # ---- callbacks de las mutations ----
    def _sent_one(self, _data) -> None:
        self.toasts.append(Toast("success", "Notification sent successfully!"))
        self.reset()

    def _sent_batch(self, _data) -> None:
        self.toasts.append(Toast("success", "Notifications sent successfully!"))
        self.reset()
        self.recipients = []

    def _failed_one(self, err: TRPCClientError) -> None:
        self.toasts.append(Toast(
            "error",
            UNAUTHORIZED_MESSAGE if err.code == "UNAUTHORIZED" else "Failed to send notification",
        ))

    def _failed_batch(self, err: TRPCClientError) -> None:
        self.toasts.append(Toast(
            "error",
            UNAUTHORIZED_MESSAGE if err.code == "UNAUTHORIZED" else "Failed to send notifications",
        ))
