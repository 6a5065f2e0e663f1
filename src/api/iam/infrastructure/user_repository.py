"""PostgreSQL implementation of IUserRepository.

Users are tenant-owned: every statement issued here is restricted to the
session's resolved tenant, with exactly two exceptions that pass
``include_all_tenants``:

- ``email_exists_globally``: registration must reject an email used by
  any tenant.
- ``get_by_email_across_tenants``: login only knows the email, and the
  user record is what tells us the tenant.
"""

from __future__ import annotations

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from iam.domain.aggregates import User
from iam.domain.value_objects import TenantId, UserId, normalize_email
from iam.infrastructure.models import UserModel
from iam.infrastructure.observability import (
    DefaultUserRepositoryProbe,
    UserRepositoryProbe,
)
from iam.ports.exceptions import GlobalEmailConflictError
from iam.ports.repositories import IUserRepository
from infrastructure.database.tenant_scoping import INCLUDE_ALL_TENANTS


class UserRepository(IUserRepository):
    """Repository managing storage for User aggregates."""

    def __init__(
        self,
        session: AsyncSession,
        probe: UserRepositoryProbe | None = None,
    ) -> None:
        self._session = session
        self._probe = probe or DefaultUserRepositoryProbe()

    async def save(self, user: User) -> None:
        """Insert a user. The tenant id is stamped from the session context.

        Raises:
            GlobalEmailConflictError: If the email is registered anywhere
            CrossTenantWriteError: If the user names a tenant other than
                the resolved one
        """
        model = UserModel(
            id=user.id.value,
            tenant_id=user.tenant_id.value,
            email=user.email,
            full_name=user.full_name,
            password_hash=user.password_hash,
        )
        self._session.add(model)

        try:
            await self._session.flush()
        except IntegrityError as e:
            if "email" in str(e.orig):
                self._probe.duplicate_email(user.email)
                raise GlobalEmailConflictError(
                    f"Email '{user.email}' is already registered"
                ) from e
            raise

        self._probe.user_saved(user.id.value, model.tenant_id)

    async def get_by_id(self, user_id: UserId) -> User | None:
        """Fetch a user of the resolved tenant."""
        stmt = select(UserModel).where(UserModel.id == user_id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        self._probe.user_retrieved(model.id)
        return self._to_domain(model)

    async def email_exists_globally(self, email: str) -> bool:
        """Check whether any tenant has registered this email."""
        stmt = select(exists().where(UserModel.email == normalize_email(email)))
        result = await self._session.execute(
            stmt, execution_options={INCLUDE_ALL_TENANTS: True}
        )
        found = bool(result.scalar())
        self._probe.cross_tenant_lookup("email_exists_globally", found)
        return found

    async def get_by_email_across_tenants(self, email: str) -> User | None:
        """Locate a user by email in any tenant."""
        stmt = select(UserModel).where(UserModel.email == normalize_email(email))
        result = await self._session.execute(
            stmt, execution_options={INCLUDE_ALL_TENANTS: True}
        )
        model = result.scalar_one_or_none()
        self._probe.cross_tenant_lookup("get_by_email_across_tenants", model is not None)
        if model is None:
            return None
        return self._to_domain(model)

    @staticmethod
    def _to_domain(model: UserModel) -> User:
        return User(
            id=UserId(value=model.id),
            tenant_id=TenantId(value=model.tenant_id),
            email=model.email,
            full_name=model.full_name,
            password_hash=model.password_hash,
        )
