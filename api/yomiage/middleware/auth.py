import json
import secrets

from starlette.types import ASGIApp, Receive, Scope, Send

from yomiage.config import settings

PUBLIC_PATHS = {"/api/v1/health", "/docs", "/openapi.json", "/redoc", "/metrics"}


def _token(headers: dict[bytes, bytes]) -> str | None:
    """API key from ``Authorization: Bearer`` or ``X-API-Key``."""
    auth = headers.get(b"authorization", b"").decode()
    scheme, _, token = auth.partition(" ")
    if scheme.lower() == "bearer" and token:
        return token
    key = headers.get(b"x-api-key", b"").decode()
    return key or None


class AuthMiddleware:
    """ASGI middleware checking the drill API key on HTTP requests."""

    def __init__(self, app: ASGIApp, api_key: str | None = None):
        self.app = app
        self._api_key = api_key

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http" or scope["path"] in PUBLIC_PATHS:
            await self.app(scope, receive, send)
            return

        token = _token(dict(scope.get("headers", [])))
        if token is None:
            await self._reject(send, "Missing API key")
            return

        expected = self._api_key or settings.api_key
        if not secrets.compare_digest(token.encode(), expected.encode()):
            await self._reject(send, "Invalid API key")
            return

        await self.app(scope, receive, send)

    @staticmethod
    async def _reject(send: Send, detail: str):
        payload = json.dumps({"detail": detail}).encode()
        await send({
            "type": "http.response.start",
            "status": 401,
            "headers": [
                [b"content-type", b"application/json"],
                [b"content-length", str(len(payload)).encode()],
                [b"www-authenticate", b"Bearer"],
            ],
        })
        await send({"type": "http.response.body", "body": payload})
