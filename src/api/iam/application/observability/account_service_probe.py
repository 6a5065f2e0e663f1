"""Protocol for account (registration and login) observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AccountServiceProbe(Protocol):
    """Domain probe for registration and login."""

    def user_registered(self, user_id: str, tenant_id: str) -> None:
        """Record that a user registered."""
        ...

    def registration_rejected(self, email: str, reason: str) -> None:
        """Record that a registration was refused."""
        ...

    def login_succeeded(self, user_id: str, tenant_id: str) -> None:
        """Record a successful login."""
        ...

    def login_failed(self, email: str, reason: str) -> None:
        """Record a failed login. The reason is never returned to clients."""
        ...

    def with_context(self, context: ObservationContext) -> AccountServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAccountServiceProbe:
    """Default implementation of AccountServiceProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultAccountServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultAccountServiceProbe(logger=self._logger, context=context)

    def user_registered(self, user_id: str, tenant_id: str) -> None:
        """Record that a user registered."""
        self._logger.info(
            "user_registered",
            user_id=user_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def registration_rejected(self, email: str, reason: str) -> None:
        """Record that a registration was refused."""
        self._logger.warning(
            "registration_rejected",
            email=email,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def login_succeeded(self, user_id: str, tenant_id: str) -> None:
        """Record a successful login."""
        self._logger.info(
            "login_succeeded",
            user_id=user_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def login_failed(self, email: str, reason: str) -> None:
        """Record a failed login. The reason is never returned to clients."""
        self._logger.warning(
            "login_failed",
            email=email,
            reason=reason,
            **self._get_context_kwargs(),
        )
