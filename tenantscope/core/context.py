"""
Tenant Context

The per-request answer to "which tenant is calling?". It is built once
per request by the framework integration (see middleware/tenant.py) and
passed explicitly to the data layer, so scoping never depends on global
"current user" state.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple


@dataclass(frozen=True)
class TenantContext:
    """
    Immutable tenant context for one request or job.

    tenant_id is None for system contexts (background jobs, maintenance
    scripts). Such contexts read unscoped and cannot write.

    readable_tenant_ids widens reads for callers that legitimately see
    several tenants (e.g. a partner account). Writes always use tenant_id.
    """

    tenant_id: Optional[str] = None
    user_id: Optional[str] = None
    readable_tenant_ids: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        # Ids from different sources (JWT claims, ints from the DB) compare as str
        object.__setattr__(
            self, "readable_tenant_ids", frozenset(str(t) for t in self.readable_tenant_ids)
        )
        if self.readable_tenant_ids and self.tenant_id is None:
            raise ValueError("readable_tenant_ids requires a tenant_id")

    @classmethod
    def system(cls) -> "TenantContext":
        """Context for trusted internal callers with no tenant."""
        return cls()

    @property
    def is_system(self) -> bool:
        return self.tenant_id is None

    @property
    def readable_tenants(self) -> Tuple[str, ...]:
        """Tenant ids a read may return: own tenant first, then the allow-list."""
        if self.tenant_id is None:
            return ()
        extra = sorted(t for t in self.readable_tenant_ids if t != str(self.tenant_id))
        return (self.tenant_id, *extra)
