# notification_api/rpc/core.py
"""
Capa de procedimientos tipados.

Cada procedimiento tiene un nombre ("notification.enqueue"), un tipo
(query / mutation), un esquema de entrada opcional y puede exigir sesión.
Los errores viajan como ProcedureError con un código del mismo catálogo
que usa el cliente (UNAUTHORIZED, BAD_REQUEST, ...).
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from notification_api.infra.servicebus_sender import QueueSender
from notification_api.security.jwt_utils import Session

logger = logging.getLogger(__name__)

# código -> (código JSON-RPC, status HTTP)
ERROR_CODES = {
    "BAD_REQUEST": (-32600, 400),
    "UNAUTHORIZED": (-32001, 401),
    "FORBIDDEN": (-32003, 403),
    "NOT_FOUND": (-32004, 404),
    "METHOD_NOT_SUPPORTED": (-32005, 405),
    "INTERNAL_SERVER_ERROR": (-32603, 500),
}


class ProcedureError(Exception):
    def __init__(self, code: str, message: str, issues: Optional[List[dict]] = None):
        if code not in ERROR_CODES:
            raise ValueError(f"unknown procedure error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.issues = issues

    @property
    def http_status(self) -> int:
        return ERROR_CODES[self.code][1]

    @property
    def json_rpc_code(self) -> int:
        return ERROR_CODES[self.code][0]


@dataclass
class Context:
    session: Optional[Session]
    queue: QueueSender


Resolver = Callable[[Any, Context], Awaitable[Any]]


@dataclass
class Procedure:
    type: str
    resolver: Resolver
    input_adapter: Optional[TypeAdapter] = None
    protected: bool = False

    async def call(self, ctx: Context, raw_input: Any) -> Any:
        # la sesión se mira antes que el input: sin sesión no se valida nada
        if self.protected and ctx.session is None:
            raise ProcedureError("UNAUTHORIZED", "UNAUTHORIZED")

        data = None
        if self.input_adapter is not None:
            try:
                data = self.input_adapter.validate_python(raw_input)
            except ValidationError as e:
                raise ProcedureError(
                    "BAD_REQUEST",
                    "Invalid input",
                    issues=json.loads(e.json(include_url=False)),
                )

        try:
            return await self.resolver(data, ctx)
        except ProcedureError:
            raise
        except Exception:
            logger.exception("[rpc] unhandled error in %s", self.resolver.__name__)
            raise ProcedureError("INTERNAL_SERVER_ERROR", "Internal Server Error")


def procedure(type: str = "query", *, input: Any = None, protected: bool = False):
    """Decorador: convierte una corutina (input, ctx) en Procedure."""
    if type not in ("query", "mutation"):
        raise ValueError(f"procedure type must be query or mutation, got {type!r}")

    def wrap(resolver: Resolver) -> Procedure:
        return Procedure(
            type=type,
            resolver=resolver,
            input_adapter=TypeAdapter(input) if input is not None else None,
            protected=protected,
        )

    return wrap


def create_router(**routers: Dict[str, Procedure]) -> Dict[str, Procedure]:
    """Aplana {"notification": {"enqueue": p}} -> {"notification.enqueue": p}."""
    flat = {}
    for prefix, procedures in routers.items():
        for name, proc in procedures.items():
            flat[f"{prefix}.{name}"] = proc
    return flat


async def call_procedure(
    router: Dict[str, Procedure],
    path: str,
    type: str,
    raw_input: Any,
    ctx: Context,
) -> Any:
    proc = router.get(path)
    if proc is None:
        raise ProcedureError("NOT_FOUND", f'No "{type}"-procedure on path "{path}"')
    if proc.type != type:
        raise ProcedureError(
            "METHOD_NOT_SUPPORTED",
            f'Unsupported {type} on {proc.type} procedure "{path}"',
        )
    return await proc.call(ctx, raw_input)
