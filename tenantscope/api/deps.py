"""
API Dependencies

FastAPI dependencies that hand handlers an explicit TenantContext and a
repository already wired with the interceptor chain.
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from tenantscope.config import get_settings
from tenantscope.database import get_db
from tenantscope.models.project import Project
from tenantscope.core.context import TenantContext
from tenantscope.core.exceptions import AuthenticationError
from tenantscope.core.interceptors import InterceptorChain, build_chain
from tenantscope.core.repository import ScopedRepository
import logging

logger = logging.getLogger(__name__)

settings = get_settings()

# Built once at startup; the chain holds no per-request state
interceptor_chain: InterceptorChain = build_chain(settings.TENANT_FIELD_NAME)


def get_tenant_context(request: Request) -> TenantContext:
    """
    Tenant context resolved by TenantContextMiddleware.

    Falls back to the system context when the middleware did not run
    (excluded paths).
    """
    return getattr(request.state, "tenant_context", None) or TenantContext.system()


def require_tenant_context(
    context: TenantContext = Depends(get_tenant_context),
) -> TenantContext:
    """
    Tenant context that must belong to an authenticated tenant.

    Use this on routes that must never fall back to unscoped reads.
    """
    if context.is_system:
        raise AuthenticationError("Tenant authentication required")
    return context


def get_interceptor_chain() -> InterceptorChain:
    return interceptor_chain


def get_project_repository(
    db: Session = Depends(get_db),
    context: TenantContext = Depends(get_tenant_context),
    chain: InterceptorChain = Depends(get_interceptor_chain),
) -> ScopedRepository:
    return ScopedRepository(db, Project, context, chain)


def get_tenant_project_repository(
    db: Session = Depends(get_db),
    context: TenantContext = Depends(require_tenant_context),
    chain: InterceptorChain = Depends(get_interceptor_chain),
) -> ScopedRepository:
    """Project repository that refuses system contexts (no unscoped reads)."""
    return ScopedRepository(db, Project, context, chain)
