"""User database model."""

from sqlalchemy import CheckConstraint, Column, String
from sqlalchemy.orm import relationship

from prophet.database.base import Base
from prophet.models.base import TimestampMixin, UUIDMixin

USER_ROLES = ("user", "admin", "super_admin")
ADMIN_ROLES = ("admin", "super_admin")


class User(Base, UUIDMixin, TimestampMixin):
    """
    Account mirrored from the identity provider.

    Keyed by the provider's user id. ``email`` is a copy of the address the
    provider last verified for that id and is not unique: addresses move
    between accounts upstream, and the provider is the authority on them.
    """

    __tablename__ = "users"

    email = Column(String(320), nullable=False, index=True)
    username = Column(String(50), nullable=True)
    full_name = Column(String(200), nullable=True)
    role = Column(String(20), nullable=False, default="user")

    # Relationships
    participations = relationship("Participant", back_populates="user")
    transactions = relationship("CreditTransaction", back_populates="user")

    __table_args__ = (
        CheckConstraint(
            "role IN ('user', 'admin', 'super_admin')",
            name="valid_user_role",
        ),
    )

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def __repr__(self) -> str:
        return f"<User {self.email}>"
