"""
Database Models

Tenant-owned models mix in TenantScopedMixin.
"""
from tenantscope.models.mixins import TenantScopedMixin
from tenantscope.models.tenant import Tenant
from tenantscope.models.project import Project

__all__ = ["TenantScopedMixin", "Tenant", "Project"]
