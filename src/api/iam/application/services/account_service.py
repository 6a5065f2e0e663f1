"""Account application service: registration and login."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.observability import (
    AccountServiceProbe,
    DefaultAccountServiceProbe,
)
from iam.application.security import hash_password, verify_password
from iam.application.value_objects import AuthResult
from iam.domain.aggregates import User
from iam.domain.value_objects import normalize_email, normalize_slug
from iam.ports.exceptions import (
    GlobalEmailConflictError,
    InvalidCredentialsError,
    RegistrationTenantError,
)
from iam.ports.repositories import ITenantRepository, IUserRepository
from shared_kernel.auth import TokenService
from shared_kernel.middleware.tenant_context import TenantContext


class AccountService:
    """Registers users into a tenant and authenticates them.

    Registration runs on a path without tenant resolution; the tenant named
    in the request body resolves the request's tenant context so the new
    user is stamped with it.
    """

    def __init__(
        self,
        user_repository: IUserRepository,
        tenant_repository: ITenantRepository,
        token_service: TokenService,
        session: AsyncSession,
        tenant_context: TenantContext,
        probe: AccountServiceProbe | None = None,
    ):
        self._user_repository = user_repository
        self._tenant_repository = tenant_repository
        self._token_service = token_service
        self._session = session
        self._tenant_context = tenant_context
        self._probe = probe or DefaultAccountServiceProbe()

    async def register(
        self,
        email: str,
        full_name: str,
        password: str,
        tenant_identifier: str,
    ) -> AuthResult:
        """Register a user in the tenant identified by ``tenant_identifier``.

        Args:
            email: Email address, unique across all tenants
            full_name: Display name
            password: Plaintext password, stored as a bcrypt hash
            tenant_identifier: Slug of the tenant to join

        Returns:
            AuthResult with a bearer token for the new user

        Raises:
            RegistrationTenantError: If the tenant is unknown or inactive
            GlobalEmailConflictError: If the email is registered anywhere
        """
        email = normalize_email(email)

        async with self._session.begin():
            try:
                slug = normalize_slug(tenant_identifier)
            except ValueError as e:
                self._probe.registration_rejected(email, "invalid_tenant_identifier")
                raise RegistrationTenantError("Invalid tenant identifier") from e

            tenant = await self._tenant_repository.get_by_slug(slug)
            if tenant is None or not tenant.is_active:
                self._probe.registration_rejected(email, "tenant_unavailable")
                raise RegistrationTenantError("Invalid or inactive tenant")

            if await self._user_repository.email_exists_globally(email):
                self._probe.registration_rejected(email, "email_taken")
                raise GlobalEmailConflictError(f"Email '{email}' is already registered")

            if not self._tenant_context.is_resolved:
                self._tenant_context.set_tenant(
                    tenant.id.value, tenant.slug, source="registration"
                )

            user = User.create(
                tenant_id=tenant.id,
                email=email,
                full_name=full_name,
                password_hash=hash_password(password),
            )
            await self._user_repository.save(user)

        self._probe.user_registered(user.id.value, tenant.id.value)
        return self._issue(user)

    async def login(self, email: str, password: str) -> AuthResult:
        """Authenticate by email and password.

        The email lookup spans all tenants; the user's own tenant must be
        active.

        Raises:
            InvalidCredentialsError: On unknown email, wrong password or an
                inactive tenant
        """
        try:
            email = normalize_email(email)
        except ValueError as e:
            raise InvalidCredentialsError("Invalid credentials") from e

        user = await self._user_repository.get_by_email_across_tenants(email)
        if user is None:
            self._probe.login_failed(email, "unknown_email")
            raise InvalidCredentialsError("Invalid credentials")

        if not verify_password(password, user.password_hash):
            self._probe.login_failed(email, "wrong_password")
            raise InvalidCredentialsError("Invalid credentials")

        tenant = await self._tenant_repository.get_by_id(user.tenant_id)
        if tenant is None or not tenant.is_active:
            self._probe.login_failed(email, "tenant_inactive")
            raise InvalidCredentialsError("Invalid credentials")

        self._probe.login_succeeded(user.id.value, tenant.id.value)
        return self._issue(user)

    def _issue(self, user: User) -> AuthResult:
        issued = self._token_service.issue(
            user_id=user.id.value,
            email=user.email,
            full_name=user.full_name,
            tenant_id=user.tenant_id.value,
        )
        return AuthResult(
            token=issued.token,
            expires_at=issued.expires_at,
            user_id=user.id.value,
            email=user.email,
            full_name=user.full_name,
            tenant_id=user.tenant_id.value,
        )
