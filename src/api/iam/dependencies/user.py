"""FastAPI dependencies for accounts and the authenticated caller."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.services import AccountService
from iam.application.value_objects import CurrentUser
from iam.dependencies.tenant import get_tenant_repository
from iam.domain.value_objects import TenantId, UserId
from iam.infrastructure.tenant_repository import TenantRepository
from iam.infrastructure.user_repository import UserRepository
from infrastructure.database.dependencies import get_write_session
from infrastructure.dependencies import get_request_tenant_context, get_token_service
from shared_kernel.auth import InvalidTokenError, TokenService
from shared_kernel.middleware.tenant_context import TenantContext

bearer_scheme = HTTPBearer(auto_error=False)


def get_user_repository(
    session: Annotated[AsyncSession, Depends(get_write_session)],
) -> UserRepository:
    """Get UserRepository instance bound to the request session."""
    return UserRepository(session=session)


def get_account_service(
    user_repository: Annotated[UserRepository, Depends(get_user_repository)],
    tenant_repository: Annotated[TenantRepository, Depends(get_tenant_repository)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
    session: Annotated[AsyncSession, Depends(get_write_session)],
    tenant_context: Annotated[TenantContext, Depends(get_request_tenant_context)],
) -> AccountService:
    """Get AccountService instance for the current request."""
    return AccountService(
        user_repository=user_repository,
        tenant_repository=tenant_repository,
        token_service=token_service,
        session=session,
        tenant_context=tenant_context,
    )


def get_current_user(
    token_service: Annotated[TokenService, Depends(get_token_service)],
    tenant_context: Annotated[TenantContext, Depends(get_request_tenant_context)],
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ] = None,
) -> CurrentUser:
    """Authenticate the caller from the bearer token.

    On tenant-resolved paths the token's tenant must be the request tenant;
    resolution already prefers the token claim, so a mismatch means the
    token carried no usable claim.

    Raises:
        HTTPException 401: Missing or invalid token
        HTTPException 403: Token tenant differs from the resolved tenant
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "UNAUTHENTICATED", "message": "Bearer token required"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        claims = token_service.validate(credentials.credentials)
    except InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "INVALID_TOKEN", "message": str(e)},
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    if not claims.tenant_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "INVALID_TOKEN", "message": "Token has no tenant claim"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    if tenant_context.is_resolved and tenant_context.tenant_id != claims.tenant_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "code": "TENANT_MISMATCH",
                "message": "Token does not belong to the request tenant",
            },
        )

    return CurrentUser(
        user_id=UserId(value=claims.sub),
        email=claims.email,
        full_name=claims.full_name,
        tenant_id=TenantId(value=claims.tenant_id),
    )
