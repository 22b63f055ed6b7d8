# notification_api/api/notifications.py
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from notification_api.api.deps import get_context, get_queue_sender, parse_json
from notification_api.infra.servicebus_sender import QueueSender
from notification_api.rpc.core import Context, ProcedureError, call_procedure
from notification_api.rpc.root import app_router

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


def _rest_error(e: ProcedureError) -> JSONResponse:
    if e.code == "BAD_REQUEST":
        content = {"error": "Invalid input", "details": e.issues or []}
    elif e.code == "INTERNAL_SERVER_ERROR":
        content = {"error": "Internal Server Error"}
    else:
        content = {"error": e.message}
    return JSONResponse(status_code=e.http_status, content=content)


async def _call(path: str, raw_input: Any, ctx: Context, status_code: int) -> JSONResponse:
    """Las rutas REST reutilizan los mismos procedimientos (auth + validación)."""
    try:
        result = await call_procedure(app_router, path, "mutation", raw_input, ctx)
    except ProcedureError as e:
        return _rest_error(e)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(result))


@router.post("")
async def create_notification(request: Request, ctx: Context = Depends(get_context)):
    """
    Encola una notificación.
    Body = NotificationRequest. Requiere Authorization: Bearer <JWT>.
    """
    try:
        raw_input = parse_json(await request.body())
    except ProcedureError as e:
        return _rest_error(e)
    return await _call("notification.enqueue", raw_input, ctx, status.HTTP_201_CREATED)


@router.post("/batch")
async def create_notifications_batch(request: Request, ctx: Context = Depends(get_context)):
    """
    Encola hasta 10 notificaciones en paralelo.
    Siempre success=true; el estado de cada una va en results[].
    """
    try:
        raw_input = parse_json(await request.body())
    except ProcedureError as e:
        return _rest_error(e)
    return await _call("notification.batchEnqueue", raw_input, ctx, status.HTTP_200_OK)


# =========================
# 🔎 Diagnóstico del productor de Service Bus
# =========================
@router.get("/debug/sender-status")
async def debug_sender_status(queue: QueueSender = Depends(get_queue_sender)):
    """
    Devuelve el estado del productor de Service Bus:
    - startedAt: cuándo arrancó
    - lastSendAt: último envío aceptado
    - lastError: último error visto (si hubo)
    - sent / failed: contadores
    - queue: nombre de la cola
    - hasConnectionString: si hay conn string configurado
    """
    return queue.status()
