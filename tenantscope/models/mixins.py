"""
Model Mixins

TenantScopedMixin marks a model as tenant-owned. It only declares the
column; scoping itself is done by TenantScopeInterceptor.

The column is named by __tenant_field__, which defaults to the
TENANT_FIELD_NAME setting. A model may override it per class. When the
name is not "tenant_id", a tenant_id synonym is added so schemas and
logs keep one attribute to read.
"""
from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import synonym

from tenantscope.config import get_settings


def tenant_column() -> Column:
    return Column(
        String(36),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )


class TenantScopedMixin:
    """Adds a non-nullable, indexed tenant foreign key named by __tenant_field__."""

    __tenant_field__ = get_settings().TENANT_FIELD_NAME

    def __init_subclass__(cls, **kwargs):
        # Runs before declarative maps the class, so the column is picked up
        field_name = cls.__tenant_field__
        if "__tablename__" in cls.__dict__ and field_name not in cls.__dict__:
            setattr(cls, field_name, tenant_column())
            if field_name != "tenant_id" and "tenant_id" not in cls.__dict__:
                setattr(cls, "tenant_id", synonym(field_name))
        super().__init_subclass__(**kwargs)
