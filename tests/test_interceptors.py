"""Unit tests for TenantScopeInterceptor and the interceptor chain."""

import logging
from types import SimpleNamespace

import pytest
from sqlalchemy import select
from sqlalchemy.orm import aliased

from tenantscope.core.context import TenantContext
from tenantscope.core.exceptions import (
    TenantConfigurationError,
    TenantIsolationError,
    UnauthorizedWrite,
)
from tenantscope.core.interceptors import (
    Interceptor,
    InterceptorChain,
    SoftDeleteInterceptor,
    TenantScopeInterceptor,
)
from tenantscope.models import Project, Tenant

from conftest import TENANT_A, TENANT_B, TENANT_C, Ledger


@pytest.fixture
def interceptor():
    return TenantScopeInterceptor()


# create


def test_create_overrides_forged_tenant_id(interceptor) -> None:
    record = SimpleNamespace(name="Acme", tenant_id=999)
    interceptor.on_before_create(record, TenantContext(tenant_id=7))
    assert record.tenant_id == 7
    assert record.name == "Acme"


def test_create_sets_tenant_when_missing(interceptor) -> None:
    record = Project(name="Acme")
    interceptor.on_before_create(record, TenantContext(tenant_id=TENANT_A))
    assert record.tenant_id == TENANT_A


@pytest.mark.parametrize("context", [None, TenantContext.system()])
def test_create_without_tenant_raises_and_leaves_record_untouched(interceptor, context) -> None:
    record = SimpleNamespace(name="Acme", tenant_id=999)
    with pytest.raises(UnauthorizedWrite) as exc_info:
        interceptor.on_before_create(record, context)
    assert exc_info.value.status_code == 401
    assert record.tenant_id == 999


def test_create_logs_security_event_on_override(interceptor, caplog) -> None:
    record = SimpleNamespace(tenant_id="8")
    with caplog.at_level(logging.WARNING, logger="tenantscope.core.interceptors"):
        interceptor.on_before_create(record, TenantContext(tenant_id="7"))
    assert "tenant_id_override" in caplog.text


def test_create_uses_configured_field_name() -> None:
    interceptor = TenantScopeInterceptor(tenant_field_name="org_id")
    record = SimpleNamespace(org_id=None)
    interceptor.on_before_create(record, TenantContext(tenant_id="7"))
    assert record.org_id == "7"


# read


def test_read_without_context_returns_query_unchanged(interceptor, db) -> None:
    query = db.query(Project)
    assert interceptor.on_before_read(query, None) is query
    assert interceptor.on_before_read(query, TenantContext.system()) is query


def test_read_conjoins_with_existing_predicates(interceptor) -> None:
    stmt = select(Project).where(Project.name == "Acme")
    scoped = interceptor.on_before_read(stmt, TenantContext(tenant_id=TENANT_A))
    sql = str(scoped)
    assert "projects.name = :name_1" in sql
    assert "projects.tenant_id = :tenant_id_1" in sql
    assert " AND " in sql


def test_read_leaves_unscoped_entities_alone(interceptor) -> None:
    stmt = select(Tenant)
    assert "WHERE" not in str(interceptor.on_before_read(stmt, TenantContext(tenant_id=TENANT_A)))


def test_collection_fetch_returns_only_own_tenant(interceptor, seeded) -> None:
    query = interceptor.on_before_read(seeded.query(Project), TenantContext(tenant_id=TENANT_A))
    rows = query.all()
    assert rows
    assert {p.tenant_id for p in rows} == {TENANT_A}


def test_point_lookup_of_other_tenant_finds_nothing(interceptor, seeded) -> None:
    other = seeded.query(Project).filter(Project.tenant_id == TENANT_B).first()
    query = seeded.query(Project).filter(Project.id == other.id)
    assert interceptor.on_before_read(query, TenantContext(tenant_id=TENANT_A)).first() is None


def test_select_statement_is_scoped(interceptor, seeded) -> None:
    stmt = interceptor.on_before_read(select(Project), TenantContext(tenant_id=TENANT_B))
    rows = seeded.scalars(stmt).all()
    assert {p.tenant_id for p in rows} == {TENANT_B}


def test_read_is_idempotent(interceptor, seeded) -> None:
    context = TenantContext(tenant_id=TENANT_A)
    once = interceptor.on_before_read(seeded.query(Project), context)
    twice = interceptor.on_before_read(once, context)
    assert {p.id for p in once.all()} == {p.id for p in twice.all()}


def test_read_with_allow_list_uses_in_predicate(interceptor, seeded) -> None:
    context = TenantContext(tenant_id=TENANT_A, readable_tenant_ids={TENANT_C})
    query = interceptor.on_before_read(seeded.query(Project), context)
    assert " IN " in str(query.statement)
    assert {p.tenant_id for p in query.all()} == {TENANT_A, TENANT_C}


def test_unscoped_read_returns_all_tenants(interceptor, seeded) -> None:
    rows = interceptor.on_before_read(seeded.query(Project), None).all()
    assert {p.tenant_id for p in rows} == {TENANT_A, TENANT_B, TENANT_C}


def test_read_uses_model_tenant_column_name() -> None:
    stmt = TenantScopeInterceptor("org_id").on_before_read(select(Ledger), TenantContext(tenant_id=TENANT_A))
    assert "ledgers.org_id = :org_id_1" in str(stmt)


def test_read_of_model_without_configured_field_raises() -> None:
    interceptor = TenantScopeInterceptor("org_id")
    with pytest.raises(TenantConfigurationError):
        interceptor.on_before_read(select(Project), TenantContext(tenant_id=TENANT_A))


def test_create_of_model_without_configured_field_raises() -> None:
    record = Project(name="Acme", tenant_id=TENANT_B)
    with pytest.raises(TenantConfigurationError):
        TenantScopeInterceptor("org_id").on_before_create(record, TenantContext(tenant_id=TENANT_A))
    assert record.tenant_id == TENANT_B


def test_read_filters_aliased_entity(interceptor) -> None:
    alias = aliased(Project)
    stmt = interceptor.on_before_read(select(alias), TenantContext(tenant_id=TENANT_A))
    assert "projects_1.tenant_id = :tenant_id_1" in str(stmt)


# update


def test_update_of_own_record_is_allowed(interceptor) -> None:
    record = SimpleNamespace(tenant_id="7")
    interceptor.on_before_update(record, {"name": "x"}, TenantContext(tenant_id="7"))


def test_update_cannot_move_record_to_another_tenant(interceptor) -> None:
    record = SimpleNamespace(tenant_id="7")
    with pytest.raises(TenantIsolationError):
        interceptor.on_before_update(record, {"tenant_id": "8"}, TenantContext(tenant_id="7"))


def test_update_of_other_tenants_record_is_rejected(interceptor) -> None:
    record = SimpleNamespace(tenant_id="8")
    with pytest.raises(TenantIsolationError):
        interceptor.on_before_update(record, {"name": "x"}, TenantContext(tenant_id="7"))


def test_update_without_tenant_raises(interceptor) -> None:
    with pytest.raises(UnauthorizedWrite):
        interceptor.on_before_update(SimpleNamespace(tenant_id="7"), {}, None)


# chain


def test_soft_delete_interceptor_hides_deleted_rows(seeded) -> None:
    rows = SoftDeleteInterceptor().before_read(seeded.query(Project), None).all()
    assert "a-gone" not in {p.name for p in rows}
    assert len(rows) == 5


def test_chain_runs_hooks_in_registration_order() -> None:
    calls = []

    class Recorder(Interceptor):
        def __init__(self, name):
            self.name = name

        def before_create(self, record, context):
            calls.append(self.name)

    chain = InterceptorChain().register(Recorder("first")).register(Recorder("second"))
    chain.run_create(SimpleNamespace(), None)
    assert calls == ["first", "second"]


def test_chain_stops_at_first_failing_create_hook() -> None:
    calls = []

    class Recorder(Interceptor):
        def before_create(self, record, context):
            calls.append("after")

    chain = InterceptorChain([TenantScopeInterceptor(), Recorder()])
    with pytest.raises(UnauthorizedWrite):
        chain.run_create(SimpleNamespace(tenant_id=None), None)
    assert calls == []


def test_chain_without_drops_interceptor_type(chain) -> None:
    reduced = chain.without(TenantScopeInterceptor)
    assert len(chain) == 2
    assert len(reduced) == 1
    assert isinstance(reduced.interceptors[0], SoftDeleteInterceptor)
