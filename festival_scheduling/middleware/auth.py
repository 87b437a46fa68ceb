"""Authentication middleware.

Tokens are minted by the identity service; this service only verifies them
and records the acting user on ``request.state``.
"""

import logging
import uuid

from fastapi import Request, status
from fastapi.responses import JSONResponse
from jose import JWTError, jwt
from starlette.middleware.base import BaseHTTPMiddleware

from festival_scheduling.core.settings import get_settings

logger = logging.getLogger(__name__)

DEV_USER_ID = "00000000-0000-0000-0000-000000000000"


def _unauthorized(request: Request, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={
            "errors": [{
                "status": "401",
                "code": code,
                "title": "Unauthorized",
                "detail": message,
                "source": {"pointer": request.url.path},
            }]
        },
        headers={"WWW-Authenticate": "Bearer"},
    )


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    Middleware to handle JWT authentication for all requests.
    Can be disabled for development/testing.
    """

    EXEMPT_PATHS = {
        "/",
        "/health",
        "/version",
        "/openapi.json",
        "/docs",
        "/redoc",
        "/favicon.ico",
    }

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.EXEMPT_PATHS:
            return await call_next(request)

        settings = get_settings()
        if settings.disable_auth:
            request.state.user_id = DEV_USER_ID
            return await call_next(request)

        authorization = request.headers.get("Authorization")
        if not authorization:
            logger.warning(f"Missing Authorization header for {request.url.path}")
            return _unauthorized(
                request, "AUTHORIZATION_REQUIRED", "Authorization header is required"
            )

        scheme, _, token = authorization.partition(" ")
        if scheme != "Bearer" or not token:
            logger.warning(f"Invalid authorization format for {request.url.path}")
            return _unauthorized(
                request,
                "INVALID_AUTHORIZATION_FORMAT",
                "Authorization must be in 'Bearer <token>' format",
            )

        try:
            payload = jwt.decode(
                token,
                settings.jwt_secret_key,
                algorithms=[settings.jwt_algorithm],
            )
        except JWTError as e:
            logger.warning(f"JWT validation failed for {request.url.path}: {e}")
            return _unauthorized(request, "INVALID_JWT_TOKEN", "Invalid or expired JWT token")

        user_id = payload.get("sub")
        if not user_id:
            return _unauthorized(
                request, "INVALID_TOKEN_PAYLOAD", "Token must contain 'sub' claim"
            )
        try:
            uuid.UUID(user_id)
        except ValueError:
            return _unauthorized(request, "INVALID_USER_ID", "User ID must be a valid UUID")

        request.state.user_id = user_id
        logger.debug(f"Authenticated user {user_id} for {request.url.path}")

        return await call_next(request)
