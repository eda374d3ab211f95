"""Access engine — create, read, toggle, update, delete and sweep objects.

Every content-returning read runs the same sequence on one record:
lookup, expiry check (expired records are deleted), TOTP gate, decrypt,
type-specific post-processing with hit accounting, then either a single
write-back or, for one-time objects, deletion.

No locking: concurrent reads of the same record race on the write-back
and the last writer wins.
"""

from __future__ import annotations

import hmac
import json
import logging
import secrets
import string
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from trufo.errors import Expired, InvalidOperation, MFAInvalid, MFARequired, NotFound
from trufo.models.stored_object import ANONYMOUS_EMAIL, ANONYMOUS_NAME, StoredObject
from trufo.schemas.stored_object import ObjectCreate, ObjectPatch
from trufo.services.object_repository import ObjectRepository
from trufo.utils import totp
from trufo.utils.crypto import ContentCodec, Decrypted

logger = logging.getLogger(__name__)

MS_PER_HOUR = 60 * 60 * 1000
ID_SUFFIX_LENGTH = 9
TOKEN_ALPHABET = string.ascii_lowercase + string.digits

# Fields a patch may set to null; everything else skips null values
NULLABLE_PATCH_FIELDS = {"last_hit", "totp_secret"}


def now_ms() -> int:
    return int(time.time() * 1000)


def _random_string(length: int) -> str:
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def new_object_id(now: int) -> str:
    return f"obj_{now}_{_random_string(ID_SUFFIX_LENGTH)}"


def new_token(length: int) -> str:
    return _random_string(length)


@dataclass
class AccessResult:
    name: str
    type: str
    content: Any
    hits: int


class AccessService:
    def __init__(
        self,
        repository: ObjectRepository,
        codec: ContentCodec,
        clock: Callable[[], int] = now_ms,
        token_length: int = 24,
        totp_issuer: str = "Trufo",
    ):
        self.repository = repository
        self.codec = codec
        self.clock = clock
        self.token_length = token_length
        self.totp_issuer = totp_issuer

    # ── Create ──────────────────────────────────────────────────────

    async def create(self, data: ObjectCreate) -> StoredObject:
        now = self.clock()
        record = StoredObject(
            id=new_object_id(now),
            name=data.name,
            type=data.type,
            content=self.codec.encrypt(data.content),
            token=new_token(self.token_length),
            ttl=now + round(data.ttl_hours * MS_PER_HOUR),
            created_at=now,
            hit_count=0,
            last_hit=None,
            owner_email=data.owner_email or ANONYMOUS_EMAIL,
            owner_name=data.owner_name or ANONYMOUS_NAME,
            one_time_access=data.one_time_access,
            totp_secret=totp.generate_secret() if data.enable_mfa else None,
        )
        record = await self.repository.insert_or_replace(record)
        logger.info(
            "Created object %s (type=%s, one_time=%s, mfa=%s)",
            record.id, record.type, record.one_time_access, record.mfa_enabled,
        )
        return record

    # ── Reads ───────────────────────────────────────────────────────

    async def fetch(self, name: str, token: str, totp_code: str | None = None) -> AccessResult:
        record = await self._lookup(name, token)
        return await self._read(record, totp_code)

    async def fetch_by_token(self, token: str, totp_code: str | None = None) -> AccessResult:
        record = await self.repository.find_by_token(token)
        if record is None:
            raise NotFound()
        return await self._read(record, totp_code)

    async def toggle(self, name: str, token: str) -> AccessResult:
        """Flip a boolean object and return the new value.

        Unlike reads of ``toggle`` objects this path has no TOTP gate and
        ignores ``one_time_access``.
        """
        record = await self._lookup(name, token)
        if record.type != "boolean":
            raise InvalidOperation("Only boolean objects can be toggled")

        now = self.clock()
        if record.is_expired(now):
            await self._expire(record)

        result = self.codec.decrypt(record.content)
        if not isinstance(result, Decrypted) or not isinstance(result.value, bool):
            raise InvalidOperation("Stored content is not a boolean")

        new_value = not result.value
        record.content = self.codec.encrypt(new_value)
        record.hit_count += 1
        record.last_hit = now
        record = await self.repository.insert_or_replace(record)
        return AccessResult(record.name, record.type, new_value, record.hit_count)

    async def _lookup(self, name: str, token: str) -> StoredObject:
        for record in await self.repository.find_by_name(name):
            if hmac.compare_digest(record.token.encode(), token.encode()):
                return record
        raise NotFound()

    async def _expire(self, record: StoredObject) -> None:
        await self.repository.delete(record.id)
        logger.info("Object %s expired and was deleted", record.id)
        raise Expired()

    def _check_mfa(self, record: StoredObject, totp_code: str | None, now: int) -> None:
        if record.totp_secret is None:
            return
        if not totp_code:
            # Pairing QR only until the first successful read
            qr = None
            if record.hit_count == 0:
                qr = totp.provisioning_uri(record.totp_secret, record.name, self.totp_issuer)
            raise MFARequired(totp_qr=qr)
        if not totp.verify(record.totp_secret, totp_code, now):
            logger.info("Rejected TOTP code for object %s", record.id)
            raise MFAInvalid()

    async def _read(self, record: StoredObject, totp_code: str | None) -> AccessResult:
        now = self.clock()
        if record.is_expired(now):
            await self._expire(record)
        self._check_mfa(record, totp_code, now)

        result = self.codec.decrypt(record.content)
        consume = record.one_time_access

        record.hit_count += 1
        record.last_hit = now
        if record.type == "toggle" and not consume:
            if isinstance(result, Decrypted) and isinstance(result.value, bool):
                # caller gets the old value, storage holds the new one
                record.content = self.codec.encrypt(not result.value)
            else:
                logger.warning("Toggle object %s holds non-boolean content, not flipped", record.id)

        response = AccessResult(record.name, record.type, result.value, record.hit_count)
        if consume:
            await self.repository.delete(record.id)
            logger.info("One-time object %s consumed and deleted", record.id)
        else:
            await self.repository.insert_or_replace(record)
        return response

    # ── Management ──────────────────────────────────────────────────

    async def update(self, object_id: str, patch: ObjectPatch) -> StoredObject:
        """Merge ``patch`` into the record as-is; content is not re-encrypted."""
        record = await self.repository.get_by_id(object_id)
        if record is None:
            raise NotFound("Object not found")

        for field, value in patch.model_dump(exclude_unset=True).items():
            if value is None and field not in NULLABLE_PATCH_FIELDS:
                continue
            if field == "content" and not isinstance(value, str):
                value = json.dumps(value)
            setattr(record, field, value)
        return await self.repository.insert_or_replace(record)

    async def delete(self, object_id: str) -> None:
        await self.repository.delete(object_id)

    async def list_by_owner(self, owner_email: str) -> list[StoredObject]:
        return await self.repository.list_by_owner(owner_email)

    async def list_all(self) -> list[StoredObject]:
        return await self.repository.list_all()

    async def sweep_expired(self) -> int:
        now = self.clock()
        expired = [record for record in await self.repository.list_all() if record.is_expired(now)]
        for record in expired:
            await self.repository.delete(record.id)
        logger.info("Sweep deleted %d expired objects", len(expired))
        return len(expired)
