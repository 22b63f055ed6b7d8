# notification_api/rpc/root.py
from notification_api.rpc.auth import auth_router
from notification_api.rpc.core import create_router
from notification_api.rpc.notification import notification_router

app_router = create_router(
    auth=auth_router,
    notification=notification_router,
)
