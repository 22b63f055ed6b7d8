# notification_api/rpc/auth.py
from notification_api.rpc.core import Context, procedure


@procedure("query")
async def get_session(input, ctx: Context):
    return ctx.session


auth_router = {
    "getSession": get_session,
}
