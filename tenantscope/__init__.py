"""
Tenant Scoping for Single-Database Multi-Tenancy

Automatic tenant isolation for a shared-schema SQLAlchemy data layer:
records are stamped with the caller's tenant on create and every read
is filtered down to that tenant.
"""

__version__ = "1.0.0"
