# notification_api/main.py
import logging
import os

from dotenv import load_dotenv

# 1) cargar variables de entorno del .env
load_dotenv()

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notification_api.api.notifications import router as notifications_router
from notification_api.api.trpc import router as trpc_router
from notification_api.config import load_settings
from notification_api.infra.servicebus_sender import QueueSender

# 2) validar configuración: si falta algo, el proceso no arranca
settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Notification Service")
app.state.settings = settings
app.state.queue_sender = QueueSender.from_settings(settings)

# 3) CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 4) procedimientos tipados + rutas REST
app.include_router(trpc_router)
app.include_router(notifications_router)

logger.info(
    "Notification service ready (queue: %s, transport: %s)",
    settings.sb_queue,
    settings.sb_transport,
)


@app.on_event("shutdown")
async def shutdown_event():
    # 5) cerrar la conexión con Service Bus
    await app.state.queue_sender.close()


@app.get("/")
async def root():
    return {"message": "Notification Service is running"}


def run():
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    run()
