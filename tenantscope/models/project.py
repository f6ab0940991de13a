"""
Project Model

Example tenant-scoped record. Any model that mixes in TenantScopedMixin
is picked up by TenantScopeInterceptor without further wiring.
"""
from sqlalchemy import Column, String, Text, Boolean, DateTime, Index
from datetime import datetime
from tenantscope.database import Base
from tenantscope.models.mixins import TenantScopedMixin
import uuid


class Project(TenantScopedMixin, Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="active", nullable=False, index=True)

    # Soft delete: rows stay for recovery, reads hide them
    is_deleted = Column(Boolean, default=False, nullable=False, index=True)
    deleted_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        # Most common query: live projects for a tenant
        Index('idx_project_tenant_deleted', TenantScopedMixin.__tenant_field__, 'is_deleted'),
    )

    def __repr__(self):
        return f"<Project {self.name} (tenant={self.tenant_id})>"
