"""CORS middleware with per-path opt-out."""

from collections.abc import Iterable

from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send


class PathExemptCORSMiddleware(CORSMiddleware):
    """CORSMiddleware that passes exempt paths straight to the app.

    Exempt routes answer preflights and set CORS headers themselves, so
    the configured origin allow-list never applies to them.
    """

    def __init__(self, app: ASGIApp, exempt_paths: Iterable[str] = (), **kwargs) -> None:
        super().__init__(app, **kwargs)
        self.exempt_paths = frozenset(exempt_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["path"] in self.exempt_paths:
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)
