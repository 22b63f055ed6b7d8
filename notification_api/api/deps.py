# notification_api/api/deps.py
import json
from typing import Any

from fastapi import Depends, Request

from notification_api.config import Settings
from notification_api.infra.servicebus_sender import QueueSender
from notification_api.rpc.core import Context, ProcedureError
from notification_api.security.jwt_utils import get_session


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_queue_sender(request: Request) -> QueueSender:
    return request.app.state.queue_sender


def get_context(
    request: Request,
    settings: Settings = Depends(get_settings),
    queue: QueueSender = Depends(get_queue_sender),
) -> Context:
    """Contexto por request: sesión (si el bearer es válido) + cola."""
    session = get_session(
        request.headers.get("Authorization", ""),
        settings.jwt_secret,
        settings.jwt_alg,
    )
    return Context(session=session, queue=queue)


def parse_json(raw: Any) -> Any:
    if raw is None or raw == b"" or raw == "":
        return None
    try:
        return json.loads(raw)
    except ValueError:
        raise ProcedureError("BAD_REQUEST", "Invalid JSON body")
