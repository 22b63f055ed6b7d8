# notification_api/api/trpc.py
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from notification_api.api.deps import get_context, parse_json
from notification_api.rpc.core import Context, ProcedureError, call_procedure
from notification_api.rpc.root import app_router

router = APIRouter(prefix="/trpc", tags=["trpc"])


def error_response(e: ProcedureError, path: str) -> JSONResponse:
    data = {
        "code": e.code,
        "httpStatus": e.http_status,
        "path": path,
    }
    if e.issues is not None:
        data["issues"] = e.issues
    return JSONResponse(
        status_code=e.http_status,
        content={"error": {"message": e.message, "code": e.json_rpc_code, "data": data}},
    )


async def _run(path: str, type: str, raw_input: Any, ctx: Context) -> JSONResponse:
    try:
        result = await call_procedure(app_router, path, type, raw_input, ctx)
    except ProcedureError as e:
        return error_response(e, path)
    return JSONResponse(content={"result": {"data": jsonable_encoder(result)}})


@router.get("/{path}")
async def trpc_query(
    path: str,
    input: Optional[str] = Query(None),
    ctx: Context = Depends(get_context),
):
    """Queries: GET /trpc/auth.getSession?input=<json>"""
    try:
        raw_input = parse_json(input)
    except ProcedureError as e:
        return error_response(e, path)
    return await _run(path, "query", raw_input, ctx)


@router.post("/{path}")
async def trpc_mutation(
    path: str,
    request: Request,
    ctx: Context = Depends(get_context),
):
    """Mutations: POST /trpc/notification.enqueue con el input como body JSON."""
    try:
        raw_input = parse_json(await request.body())
    except ProcedureError as e:
        return error_response(e, path)
    return await _run(path, "mutation", raw_input, ctx)
