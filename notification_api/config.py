# notification_api/config.py
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

# sin estas dos no arrancamos
REQUIRED_ENVS = (
    "AZURE_SERVICE_BUS_CONNECTION_STRING",
    "AZURE_SERVICE_BUS_QUEUE_NAME",
)

TRANSPORTS = ("websocket", "amqp")


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class Settings:
    sb_conn_str: str
    sb_queue: str
    sb_transport: str = "websocket"
    jwt_secret: str = "dev-secret-change-me"
    jwt_alg: str = "HS256"
    cors_origins: Tuple[str, ...] = field(default_factory=lambda: ("*",))
    log_level: str = "INFO"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Lee la configuración UNA vez (al arrancar el proceso).
    Si falta alguna variable obligatoria lanza ConfigError
    antes de servir ninguna request.
    """
    env = os.environ if environ is None else environ

    for key in REQUIRED_ENVS:
        if not env.get(key):
            raise ConfigError(f"Missing required environment variable: {key}")

    transport = env.get("AZURE_SERVICE_BUS_TRANSPORT", "websocket").lower()
    if transport not in TRANSPORTS:
        raise ConfigError(
            f"AZURE_SERVICE_BUS_TRANSPORT must be one of {', '.join(TRANSPORTS)}, got {transport!r}"
        )

    origins = tuple(
        o.strip() for o in env.get("CORS_ORIGINS", "*").split(",") if o.strip()
    )

    return Settings(
        sb_conn_str=env["AZURE_SERVICE_BUS_CONNECTION_STRING"],
        sb_queue=env["AZURE_SERVICE_BUS_QUEUE_NAME"],
        sb_transport=transport,
        jwt_secret=env.get("JWT_SECRET", "dev-secret-change-me"),
        jwt_alg=env.get("JWT_ALG", "HS256"),
        cors_origins=origins or ("*",),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )
