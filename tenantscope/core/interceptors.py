"""
Data-Access Interceptors

Hooks that run before every create, read and update issued through
ScopedRepository. Interceptors are registered once, in order, on an
InterceptorChain when the repository is built.

TenantScopeInterceptor is the one that matters for isolation:
- create: stamp the caller's tenant on the record (overriding whatever
  the client sent)
- read: conjoin a tenant predicate onto the query
- update: refuse cross-tenant changes and tenant reassignment
"""
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import inspect

from tenantscope.core.context import TenantContext
from tenantscope.core.exceptions import (
    UnauthorizedWrite,
    TenantIsolationError,
    TenantConfigurationError,
)
from tenantscope.models.mixins import TenantScopedMixin
from tenantscope.utils.logging import get_logger, log_security_event

logger = get_logger(__name__)


def _query_entities(query) -> List[Any]:
    """ORM entities selected by a Query or Select, without duplicates."""
    entities = []
    for description in query.column_descriptions:
        entity = description.get("entity")
        if entity is not None and entity not in entities:
            entities.append(entity)
    return entities


class Interceptor:
    """Base interceptor. Every hook is a no-op unless overridden."""

    def before_create(self, record: Any, context: Optional[TenantContext]) -> None:
        pass

    def before_read(self, query, context: Optional[TenantContext]):
        return query

    def before_update(self, record: Any, changes: Dict[str, Any], context: Optional[TenantContext]) -> None:
        pass


class TenantScopeInterceptor(Interceptor):
    """
    Enforces tenant isolation on a shared-schema data layer.

    Both hooks are synchronous and keep no state between calls; the only
    thing shared is the tenant field name, fixed at construction.
    """

    def __init__(self, tenant_field_name: str = "tenant_id"):
        self.tenant_field_name = tenant_field_name

    def _tenant_attribute(self, model: Any):
        """
        The tenant attribute of a mapped class, or None for models that are
        not tenant-owned. A tenant-owned model without the configured field
        raises rather than silently going unscoped.
        """
        attribute = getattr(model, self.tenant_field_name, None)
        if attribute is None and isinstance(model, type) and issubclass(model, TenantScopedMixin):
            logger.error(
                f"{model.__name__} declares tenant field {model.__tenant_field__!r}, "
                f"interceptor expects {self.tenant_field_name!r}"
            )
            raise TenantConfigurationError(model.__name__, self.tenant_field_name)
        return attribute

    def on_before_create(self, record: Any, context: Optional[TenantContext]) -> Any:
        """
        Stamp the caller's tenant on a record about to be persisted.

        Any tenant id already present on the record is discarded.
        Raises UnauthorizedWrite (and leaves the record untouched) when
        there is no tenant context.
        """
        if context is None or context.tenant_id is None:
            log_security_event(
                "unauthorized_write",
                {"model": type(record).__name__},
                logger,
            )
            raise UnauthorizedWrite()

        self._tenant_attribute(type(record))

        supplied = getattr(record, self.tenant_field_name, None)
        if supplied is not None and supplied != context.tenant_id:
            # Client tried to pick its own tenant
            log_security_event(
                "tenant_id_override",
                {
                    "model": type(record).__name__,
                    "supplied_tenant_id": supplied,
                    "tenant_id": context.tenant_id,
                    "user_id": context.user_id,
                },
                logger,
            )

        setattr(record, self.tenant_field_name, context.tenant_id)
        return record

    def on_before_read(self, query, context: Optional[TenantContext]):
        """
        Conjoin a tenant predicate onto a pending read.

        Works for point lookups and collection fetches alike, on both
        session.query() and select() objects. Existing criteria are kept.
        With no tenant context the same query object is returned as-is;
        that unscoped mode is reserved for system callers.
        """
        if context is None or context.tenant_id is None:
            return query

        tenants = context.readable_tenants
        for entity in _query_entities(query):
            if self._tenant_attribute(inspect(entity).mapper.class_) is None:
                continue
            # Read off the entity itself so aliases filter on the alias
            column = getattr(entity, self.tenant_field_name)
            if len(tenants) == 1:
                query = query.filter(column == tenants[0])
            else:
                query = query.filter(column.in_(tenants))

        logger.debug(
            "Scoped read to tenants %s", ", ".join(str(t) for t in tenants),
            extra={"tenant_id": context.tenant_id},
        )
        return query

    def on_before_update(self, record: Any, changes: Dict[str, Any], context: Optional[TenantContext]) -> None:
        """Reject updates that would move or touch another tenant's record."""
        if context is None or context.tenant_id is None:
            raise UnauthorizedWrite()

        self._tenant_attribute(type(record))
        current = getattr(record, self.tenant_field_name, None)
        if current != context.tenant_id:
            log_security_event(
                "cross_tenant_update",
                {
                    "model": type(record).__name__,
                    "record_tenant_id": current,
                    "tenant_id": context.tenant_id,
                    "user_id": context.user_id,
                },
                logger,
            )
            raise TenantIsolationError("Record belongs to another tenant")

        if self.tenant_field_name in changes and changes[self.tenant_field_name] != current:
            raise TenantIsolationError("Tenant of a record cannot be changed")

    # Chain hooks
    before_create = on_before_create
    before_read = on_before_read
    before_update = on_before_update


class SoftDeleteInterceptor(Interceptor):
    """Hides soft-deleted rows from every read on models that support it."""

    def __init__(self, flag_field_name: str = "is_deleted"):
        self.flag_field_name = flag_field_name

    def before_read(self, query, context: Optional[TenantContext]):
        for entity in _query_entities(query):
            column = getattr(entity, self.flag_field_name, None)
            if column is not None:
                query = query.filter(column == False)  # noqa: E712
        return query


class InterceptorChain:
    """
    Ordered interceptors applied around the data layer.

    Hooks run in registration order. Read hooks thread the query
    through the chain; create/update hooks stop at the first error.
    """

    def __init__(self, interceptors: Optional[Iterable[Interceptor]] = None):
        self.interceptors: List[Interceptor] = list(interceptors or [])

    def register(self, interceptor: Interceptor) -> "InterceptorChain":
        self.interceptors.append(interceptor)
        return self

    @property
    def tenant_field_name(self) -> Optional[str]:
        """Field name of the first tenant interceptor, None if there is none."""
        for interceptor in self.interceptors:
            if isinstance(interceptor, TenantScopeInterceptor):
                return interceptor.tenant_field_name
        return None

    def without(self, interceptor_type: type) -> "InterceptorChain":
        """Copy of this chain minus interceptors of the given type."""
        return InterceptorChain(
            i for i in self.interceptors if not isinstance(i, interceptor_type)
        )

    def run_create(self, record: Any, context: Optional[TenantContext]) -> Any:
        for interceptor in self.interceptors:
            interceptor.before_create(record, context)
        return record

    def run_read(self, query, context: Optional[TenantContext]):
        for interceptor in self.interceptors:
            query = interceptor.before_read(query, context)
        return query

    def run_update(self, record: Any, changes: Dict[str, Any], context: Optional[TenantContext]) -> None:
        for interceptor in self.interceptors:
            interceptor.before_update(record, changes, context)

    def __len__(self):
        return len(self.interceptors)


def build_chain(tenant_field_name: str = "tenant_id") -> InterceptorChain:
    """Default chain: tenant scoping first, then soft-delete filtering."""
    return InterceptorChain([
        TenantScopeInterceptor(tenant_field_name),
        SoftDeleteInterceptor(),
    ])
