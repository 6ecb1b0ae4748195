from starlette.middleware.base import BaseHTTPMiddleware

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST",
    "Access-Control-Allow-Headers": "Content-Type",
}


class AllowAllOriginsMiddleware(BaseHTTPMiddleware):
    """Stamp the permissive CORS headers on every response, Origin header or not."""

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response
