"""
Scoped Repository

The data-access layer every handler goes through. Each repository is
built with an explicit TenantContext and an InterceptorChain, so tenant
filtering happens here instead of at each call site.

PATTERN:
    repo = ScopedRepository(db, Project, context, build_chain())
    repo.create(name="Acme")      # tenant_id stamped from context
    repo.list()                   # only the caller's tenant
    repo.unscoped().list()        # explicit opt-out, read-only

Trusted jobs that need every tenant either run with
TenantContext.system() or call unscoped(); both are visible in code.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tenantscope.core.context import TenantContext
from tenantscope.core.exceptions import RecordWriteError
from tenantscope.core.interceptors import InterceptorChain, TenantScopeInterceptor
from tenantscope.utils.logging import get_logger

logger = get_logger(__name__)


class _Reader:
    """Read operations shared by scoped and unscoped repositories."""

    def __init__(
        self,
        db: Session,
        model: Type[Any],
        context: Optional[TenantContext],
        chain: InterceptorChain,
    ):
        self.db = db
        self.model = model
        self.context = context
        self.chain = chain

    def query(self):
        """Base query with every read interceptor applied."""
        return self.chain.run_read(self.db.query(self.model), self.context)

    def _filtered(self, filters: Optional[Dict[str, Any]]):
        query = self.query()
        for name, value in (filters or {}).items():
            column = getattr(self.model, name, None)
            if column is None:
                raise ValueError(f"{self.model.__name__} has no attribute {name!r}")
            query = query.filter(column == value)
        return query

    def get(self, record_id: Any) -> Optional[Any]:
        """Point lookup by primary key. None if not visible to the caller."""
        return self._filtered({"id": record_id}).first()

    def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Any]:
        """Collection fetch, newest first when the model has created_at."""
        query = self._filtered(filters)
        created_at = getattr(self.model, "created_at", None)
        if created_at is not None:
            query = query.order_by(created_at.desc())
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        return self._filtered(filters).count()


class UnscopedReader(_Reader):
    """
    Read-only view without tenant filtering.

    Only reachable through ScopedRepository.unscoped(). It has no
    create/update: writes always need a tenant.
    """


class ScopedRepository(_Reader):
    """Tenant-scoped create/read/update for one model."""

    def _commit(self, record: Any) -> None:
        """Commit and refresh, rolling back if the database rejects the write."""
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(
                f"{self.model.__name__} write rejected: {e.orig}",
                extra={"tenant_id": self.context.tenant_id if self.context else None},
            )
            raise RecordWriteError(f"{self.model.__name__} could not be written") from e
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(record)

    def create(self, **attrs) -> Any:
        """
        Build, stamp and persist a record.

        If any create interceptor raises, nothing is added to the session.
        """
        record = self.model(**attrs)
        self.chain.run_create(record, self.context)

        self.db.add(record)
        self._commit(record)

        field_name = self.chain.tenant_field_name
        logger.info(
            f"{self.model.__name__} created: {record.id}",
            extra={"tenant_id": getattr(record, field_name, None) if field_name else None},
        )
        return record

    def update(self, record: Any, **changes) -> Any:
        """Apply changes after every update interceptor has accepted them."""
        self.chain.run_update(record, changes, self.context)

        for name, value in changes.items():
            setattr(record, name, value)

        self._commit(record)
        return record

    def soft_delete(self, record: Any) -> Any:
        """Mark a record deleted. It disappears from scoped and unscoped reads."""
        return self.update(record, is_deleted=True, deleted_at=datetime.utcnow())

    def unscoped(self) -> UnscopedReader:
        """Explicit opt-out of tenant filtering for trusted readers."""
        logger.info(
            f"Unscoped read of {self.model.__name__} requested",
            extra={"tenant_id": self.context.tenant_id if self.context else None},
        )
        return UnscopedReader(
            self.db,
            self.model,
            self.context,
            self.chain.without(TenantScopeInterceptor),
        )
