"""
Tenant Context Middleware

Turns the request's bearer token into a TenantContext and stores it on
request.state.tenant_context. Route handlers never read it directly;
they receive it through the get_tenant_context dependency and hand it
to a ScopedRepository.

- Valid token: TenantContext(tenant_id=<tenant_id claim>, user_id=<sub>)
- No Authorization header: system context (unscoped reads, no writes)
- Invalid/expired token: 401, the request never reaches a handler
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from typing import Optional
import logging

from tenantscope.core.context import TenantContext
from tenantscope.core.security import decode_access_token
from tenantscope.utils.logging import log_security_event

logger = logging.getLogger(__name__)


class TenantContextMiddleware(BaseHTTPMiddleware):
    """
    Resolves the tenant context for every request.

    SECURITY: this is the only place a TenantContext is built from
    untrusted input.
    """

    def __init__(self, app):
        super().__init__(app)
        self.excluded_paths = [
            "/docs",
            "/redoc",
            "/openapi.json",
            "/health",
        ]

    async def dispatch(self, request: Request, call_next):
        if any(request.url.path.startswith(path) for path in self.excluded_paths):
            return await call_next(request)

        token = self._extract_bearer_token(request)
        if token is None:
            request.state.tenant_context = TenantContext.system()
            return await call_next(request)

        context = self._build_context(token)
        if context is None:
            log_security_event("invalid_token", {"path": request.url.path}, logger)
            return JSONResponse(
                status_code=401,
                content={"detail": "Invalid or expired token", "type": "authentication_error"},
                headers={"WWW-Authenticate": "Bearer"},
            )

        request.state.tenant_context = context
        logger.debug(
            f"Request for tenant: {context.tenant_id}",
            extra={"tenant_id": context.tenant_id, "user_id": context.user_id},
        )
        return await call_next(request)

    def _extract_bearer_token(self, request: Request) -> Optional[str]:
        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return None
        return auth_header[len("Bearer "):]

    def _build_context(self, token: str) -> Optional[TenantContext]:
        """None when the token is invalid or carries no tenant."""
        payload = decode_access_token(token)
        if not payload or not payload.get("tenant_id"):
            return None

        readable = payload.get("readable_tenant_ids") or []
        if not isinstance(readable, list) or not all(isinstance(t, str) for t in readable):
            logger.warning("Malformed readable_tenant_ids claim")
            return None

        return TenantContext(
            tenant_id=payload["tenant_id"],
            user_id=payload.get("sub"),
            readable_tenant_ids=readable,
        )
