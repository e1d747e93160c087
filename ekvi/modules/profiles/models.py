from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text
from ekvi.core.base import Base, TimestampedMixin

ROLES = ("athlete", "coach", "admin")
ACCOUNT_STATUSES = ("active", "suspended")

class UserProfile(Base, TimestampedMixin):
    auth_id: Mapped[str] = mapped_column(String(128), unique=True, index=True)  # auth provider user id
    display_name: Mapped[str] = mapped_column(String(120))
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    role: Mapped[str] = mapped_column(String(16), index=True)  # athlete | coach | admin
    location: Mapped[str | None] = mapped_column(String(120), nullable=True, index=True)
    timezone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    account_status: Mapped[str] = mapped_column(String(16), default="active")  # active | suspended
