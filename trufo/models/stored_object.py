"""StoredObject ORM model — one named, token-guarded, expiring value."""

from sqlalchemy import BigInteger, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from trufo.database import Base

ANONYMOUS_EMAIL = "anonymous"
ANONYMOUS_NAME = "Anonymous User"


class StoredObject(Base):
    __tablename__ = "trufo_objects"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(256), index=True)  # not unique
    type: Mapped[str] = mapped_column(String(16))  # string | boolean | toggle
    content: Mapped[str] = mapped_column(Text)  # iv_hex:ciphertext_hex
    token: Mapped[str] = mapped_column(String(128), unique=True, index=True)
    # Instants are epoch milliseconds
    ttl: Mapped[int] = mapped_column(BigInteger)
    created_at: Mapped[int] = mapped_column(BigInteger)
    hit_count: Mapped[int] = mapped_column(Integer, default=0)
    last_hit: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    owner_email: Mapped[str] = mapped_column(String(320), index=True, default=ANONYMOUS_EMAIL)
    owner_name: Mapped[str] = mapped_column(String(256), default=ANONYMOUS_NAME)
    one_time_access: Mapped[bool] = mapped_column(Boolean, default=False)
    totp_secret: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def is_expired(self, now: int) -> bool:
        return self.ttl <= now

    @property
    def mfa_enabled(self) -> bool:
        return self.totp_secret is not None
