"""
Tenant Model

The tenant is the isolation boundary. All tenants share one database
and one schema; rows are separated by their tenant_id column.
"""
from sqlalchemy import Column, String, Boolean, DateTime
from datetime import datetime
from tenantscope.database import Base
import uuid


class Tenant(Base):
    __tablename__ = "tenants"

    # UUIDs avoid enumeration attacks across tenants
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Tenant {self.slug}>"
