"""Tenant-scoped persistence.

Every ORM model that mixes in ``TenantOwned`` is isolated per tenant:

- Every ORM SELECT, UPDATE and DELETE is restricted to the tenant of the
  session's ``TenantContext`` through ``with_loader_criteria``, including
  tenant-owned tables reached only through a join or ``select_from``. A
  statement that reads any tenant-owned table while the context is
  unresolved raises ``TenantUnresolvedError``.
- New tenant-owned objects are stamped with the resolved tenant id on
  flush. A pending object that names another tenant is rejected, and the
  tenant id of a persisted object can never change.

The only way around the restriction is the ``include_all_tenants``
execution option, which callers must pass explicitly per statement.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import ForeignKey, String, event, inspect
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import (
    Mapped,
    ORMExecuteState,
    Session,
    UOWTransaction,
    declared_attr,
    mapped_column,
    with_loader_criteria,
)
from sqlalchemy.sql.util import find_tables

from shared_kernel.middleware.tenant_context import (
    CrossTenantWriteError,
    TenantContext,
    TenantImmutableError,
    TenantUnresolvedError,
)

TENANT_CONTEXT_KEY = "tenant_context"
INCLUDE_ALL_TENANTS = "include_all_tenants"


class TenantOwned:
    """Mixin marking a model as owned by exactly one tenant."""

    @declared_attr
    def tenant_id(cls) -> Mapped[str]:
        return mapped_column(
            String(26),
            ForeignKey("tenants.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )


class TenantScopedSession(Session):
    """Session class carrying the tenant isolation hooks.

    The tenant context lives in ``session.info`` under ``TENANT_CONTEXT_KEY``.
    """

    @property
    def tenant_context(self) -> TenantContext | None:
        return self.info.get(TENANT_CONTEXT_KEY)


def _tenant_owned_tables() -> set[str]:
    names: set[str] = set()
    pending = list(TenantOwned.__subclasses__())
    while pending:
        cls = pending.pop()
        pending.extend(cls.__subclasses__())
        table = getattr(cls, "__table__", None)
        if table is not None:
            names.add(table.name)
    return names


def _touches_tenant_owned(execute_state: ORMExecuteState) -> bool:
    if any(
        issubclass(mapper.class_, TenantOwned) for mapper in execute_state.all_mappers
    ):
        return True
    # Joined or aggregated tables never show up as top-level mappers
    owned = _tenant_owned_tables()
    return any(
        getattr(table, "name", None) in owned
        for table in find_tables(
            execute_state.statement, check_columns=True, include_crud=True
        )
    )


@event.listens_for(TenantScopedSession, "do_orm_execute")
def _restrict_to_current_tenant(execute_state: ORMExecuteState) -> None:
    if not (
        execute_state.is_select or execute_state.is_update or execute_state.is_delete
    ):
        return
    # Criteria added to the parent statement already propagate to these.
    if execute_state.is_column_load or execute_state.is_relationship_load:
        return
    if execute_state.execution_options.get(INCLUDE_ALL_TENANTS, False):
        return

    context = execute_state.session.info.get(TENANT_CONTEXT_KEY)
    if context is None or not context.is_resolved:
        if not _touches_tenant_owned(execute_state):
            return
        raise TenantUnresolvedError(
            "Tenant-owned data cannot be queried without a resolved tenant"
        )

    tenant_id = context.tenant_id
    execute_state.statement = execute_state.statement.options(
        with_loader_criteria(
            TenantOwned,
            lambda cls: cls.tenant_id == tenant_id,
            include_aliases=True,
        )
    )


@event.listens_for(TenantScopedSession, "before_flush")
def _stamp_and_guard_tenant(
    session: Session, flush_context: UOWTransaction, instances: Any
) -> None:
    context: TenantContext | None = session.info.get(TENANT_CONTEXT_KEY)
    resolved = context is not None and context.is_resolved

    for obj in session.new:
        if not isinstance(obj, TenantOwned):
            continue
        if not resolved:
            raise TenantUnresolvedError(
                f"Cannot create {type(obj).__name__} without a resolved tenant"
            )
        assert context is not None
        if obj.tenant_id is None:
            obj.tenant_id = context.tenant_id
        elif obj.tenant_id != context.tenant_id:
            raise CrossTenantWriteError(
                f"{type(obj).__name__} names tenant {obj.tenant_id} but the "
                f"resolved tenant is {context.tenant_id}"
            )

    for obj in session.dirty:
        if not isinstance(obj, TenantOwned):
            continue
        history = inspect(obj).attrs.tenant_id.history
        if history.deleted and history.added and history.added != history.deleted:
            raise TenantImmutableError(
                f"Tenant of {type(obj).__name__} cannot be changed"
            )


def create_tenant_sessionmaker(engine: Any) -> async_sessionmaker[AsyncSession]:
    """Build the session factory used for all application data access.

    Args:
        engine: AsyncEngine the sessions bind to

    Returns:
        Sessionmaker producing AsyncSessions backed by TenantScopedSession
    """
    return async_sessionmaker(
        engine,
        expire_on_commit=False,
        class_=AsyncSession,
        sync_session_class=TenantScopedSession,
    )


def open_tenant_session(
    session_factory: async_sessionmaker[AsyncSession],
    context: TenantContext,
) -> AsyncSession:
    """Open a session whose data access is scoped by ``context``.

    The context is shared by reference, so resolving it after the session
    was opened takes effect for subsequent statements.
    """
    return session_factory(info={TENANT_CONTEXT_KEY: context})
