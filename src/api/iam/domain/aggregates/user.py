"""User aggregate for IAM context."""

from __future__ import annotations

from dataclasses import dataclass

from iam.domain.value_objects import TenantId, UserId, normalize_email


@dataclass(frozen=True)
class User:
    """User aggregate representing a person who belongs to one tenant.

    Email addresses are unique across the whole system (not per tenant),
    so a login by email identifies exactly one user and one tenant.
    """

    id: UserId
    tenant_id: TenantId
    email: str
    full_name: str
    password_hash: str

    @classmethod
    def create(
        cls,
        tenant_id: TenantId,
        email: str,
        full_name: str,
        password_hash: str,
    ) -> "User":
        """Factory method for registering a new user."""
        return cls(
            id=UserId.generate(),
            tenant_id=tenant_id,
            email=normalize_email(email),
            full_name=full_name.strip(),
            password_hash=password_hash,
        )

    def __str__(self) -> str:
        """Return string representation."""
        return f"User({self.email})"

    def __eq__(self, other: object) -> bool:
        """Users are equal if they have the same ID (identity-based equality)."""
        if not isinstance(other, User):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on ID for use in sets and dicts."""
        return hash(self.id)
