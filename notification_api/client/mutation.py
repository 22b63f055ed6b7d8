# notification_api/client/mutation.py
"""
Cliente de los procedimientos remotos.

    api = ApiClient("http://localhost:8000", token=jwt)
    result = await api.notification.enqueue.mutate({...})

Cada Mutation expone is_loading / data / error para que la UI
pueda deshabilitar el submit y mostrar el error.
"""
from typing import Any, Callable, Optional

import httpx
from pydantic import ValidationError

from notification_api.models.notification import (
    BatchEnqueueResult,
    EnqueueResult,
)


class TRPCClientError(Exception):
    def __init__(self, message: str, data: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.data = data or {}

    @property
    def code(self) -> Optional[str]:
        return self.data.get("code")

    @classmethod
    def from_response(cls, response: httpx.Response, path: str) -> "TRPCClientError":
        try:
            err = response.json()["error"]
            return cls(err.get("message", ""), err.get("data"))
        except (ValueError, KeyError, TypeError):
            return cls(
                f"Unexpected response from {path}",
                {"code": "INTERNAL_SERVER_ERROR", "httpStatus": response.status_code, "path": path},
            )


def unwrap(response: httpx.Response, path: str, output_type: Any = None) -> Any:
    """Saca result.data de una respuesta 2xx; si no es el sobre esperado -> TRPCClientError."""
    try:
        data = response.json()["result"]["data"]
        if output_type is not None:
            data = output_type.model_validate(data)
    except (ValueError, KeyError, TypeError, ValidationError) as e:
        raise TRPCClientError(
            f"Unexpected response from {path}",
            {"code": "INTERNAL_SERVER_ERROR", "httpStatus": response.status_code, "path": path},
        ) from e
    return data


class Mutation:
    def __init__(
        self,
        http: httpx.AsyncClient,
        path: str,
        output_type: Any = None,
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[TRPCClientError], None]] = None,
    ):
        self._http = http
        self.path = path
        self.output_type = output_type
        self.on_success = on_success
        self.on_error = on_error
        self._in_flight = 0
        self.data = None
        self.error: Optional[TRPCClientError] = None

    @property
    def is_loading(self) -> bool:
        # varias llamadas solapadas: sigue cargando hasta que acabe la última
        return self._in_flight > 0

    async def mutate(self, input: Any) -> Any:
        """Una llamada, sin reintentos. Lanza TRPCClientError si falla."""
        self._in_flight += 1
        self.error = None
        try:
            try:
                response = await self._http.post(f"/trpc/{self.path}", json=input)
            except httpx.HTTPError as e:
                raise TRPCClientError(
                    str(e) or "Network error",
                    {"code": "INTERNAL_SERVER_ERROR", "path": self.path},
                ) from e

            if response.is_error:
                raise TRPCClientError.from_response(response, self.path)

            data = unwrap(response, self.path, self.output_type)
        except TRPCClientError as e:
            self.error = e
            if self.on_error:
                self.on_error(e)
            raise
        finally:
            self._in_flight -= 1

        self.data = data
        if self.on_success:
            self.on_success(data)
        return data


class _NotificationProcedures:
    def __init__(self, http: httpx.AsyncClient):
        self.enqueue = Mutation(http, "notification.enqueue", EnqueueResult)
        self.batch_enqueue = Mutation(http, "notification.batchEnqueue", BatchEnqueueResult)


class _AuthProcedures:
    def __init__(self, http: httpx.AsyncClient):
        self._http = http

    async def get_session(self) -> Optional[dict]:
        response = await self._http.get("/trpc/auth.getSession")
        if response.is_error:
            raise TRPCClientError.from_response(response, "auth.getSession")
        return unwrap(response, "auth.getSession")


class ApiClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._http = httpx.AsyncClient(base_url=base_url, headers=headers, transport=transport)
        self.notification = _NotificationProcedures(self._http)
        self.auth = _AuthProcedures(self._http)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
