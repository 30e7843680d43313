"""Autenticación por Bearer token para el endpoint de ingesta.

El token esperado es API_TOKEN (obligatorio, ver common.config). El chequeo
corre como middleware, antes de que FastAPI lea y valide el body: una
request sin credenciales recibe 401 aunque el JSON sea inválido.
"""

from __future__ import annotations

import hmac
import logging
from typing import Iterable

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "Bearer "


def _unauthorized() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": "Unauthorized"},
        headers={"WWW-Authenticate": "Bearer"},
    )


def bearer_token(authorization: str | None) -> str:
    """Token de un header ``Authorization: Bearer <token>``; "" si no aplica."""
    header = authorization or ""
    return header[len(_BEARER_PREFIX):] if header.startswith(_BEARER_PREFIX) else ""


class BearerTokenMiddleware(BaseHTTPMiddleware):
    """Exige ``Authorization: Bearer <API_TOKEN>`` bajo los prefijos protegidos.

    Header ausente, esquema distinto, token vacío o incorrecto -> 401.
    El resto de rutas (p. ej. /healthz) queda público.
    """

    def __init__(
        self,
        app,
        api_token: str,
        protected_prefixes: Iterable[str] = ("/api/",),
    ) -> None:
        super().__init__(app)
        self._expected = api_token.encode("utf-8")
        self._prefixes = tuple(protected_prefixes)

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self._prefixes):
            return await call_next(request)

        token = bearer_token(request.headers.get("Authorization"))
        if not token:
            logger.warning("[Auth] Unauthorized request: missing Bearer token path=%s", request.url.path)
            return _unauthorized()

        if not hmac.compare_digest(token.encode("utf-8"), self._expected):
            logger.warning("[Auth] Unauthorized request: invalid API token path=%s", request.url.path)
            return _unauthorized()

        return await call_next(request)
