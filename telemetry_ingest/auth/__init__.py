"""Módulo de autenticación para endpoints de ingesta."""

from .bearer import BearerTokenMiddleware, bearer_token

__all__ = [
    "BearerTokenMiddleware",
    "bearer_token",
]
