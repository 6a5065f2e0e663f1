"""SQLAlchemy ORM model for the users table."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin
from infrastructure.database.tenant_scoping import TenantOwned


class UserModel(Base, TenantOwned, TimestampMixin):
    """ORM model for users table.

    Users are tenant-owned, but the email column carries a global unique
    index: an address can be registered by exactly one tenant.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True
    )
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserModel(id={self.id}, email={self.email})>"
