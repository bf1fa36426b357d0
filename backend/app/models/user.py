"""
SnapShare Backend — User SQLAlchemy Model
============================================

What:  ORM model representing the `users` table.
Why:   Backs SqlUserRepository; Alembic reads it for migrations.
Who:   Only SqlUserRepository reads and writes rows. Everything above the
       repository works with UserRecord instead of this class.

Table Design Rationale:
    - id: string UUID generated in Python, so the same model works on
      PostgreSQL and SQLite
    - email: UNIQUE. This constraint is what actually closes the
      check-then-create race between two concurrent registrations; the
      service-level pre-check only produces the friendlier error first.
    - password_hash: bcrypt output (60 chars, salt embedded). Never leaves
      the repository layer except inside a UserRecord.
    - role: short string holding a Role value
    - created_at: UTC with timezone
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.schemas.auth import EMAIL_MAX_LENGTH, USERNAME_MAX_LENGTH


class User(Base):
    """A registered account. Immutable after creation in this service."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    username: Mapped[str] = mapped_column(String(USERNAME_MAX_LENGTH), nullable=False)

    email: Mapped[str] = mapped_column(String(EMAIL_MAX_LENGTH), nullable=False)

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="consumer",
        comment="creator or consumer",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
    )

    def __repr__(self) -> str:
        # no password_hash in the repr
        return f"<User(id={self.id}, role='{self.role}')>"
