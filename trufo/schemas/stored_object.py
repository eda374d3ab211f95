"""StoredObject request/response schemas (camelCase on the wire)."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

ObjectType = Literal["string", "boolean", "toggle"]

REQUIRED_CREATE_FIELDS = ("name", "type", "content", "ttlHours")

# Instants live in signed 64-bit integer columns
MAX_INSTANT_MS = 2**63 - 1
# About 114,000 years; keeps now + ttl well inside MAX_INSTANT_MS
MAX_TTL_HOURS = 1_000_000_000


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ObjectCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=256)
    type: ObjectType
    content: Any  # checked against ``type`` below
    # fractional hours allowed, 0 is valid
    ttl_hours: float = Field(..., ge=0, le=MAX_TTL_HOURS, allow_inf_nan=False)
    owner_email: str | None = None
    owner_name: str | None = None
    one_time_access: bool = False
    enable_mfa: bool = Field(False, alias="enableMFA")

    @model_validator(mode="before")
    @classmethod
    def _require_fields(cls, data: Any) -> Any:
        if isinstance(data, dict):
            def absent(field: str) -> bool:
                snake = "ttl_hours" if field == "ttlHours" else field
                return data.get(field) is None and data.get(snake) is None

            # None / missing only; 0 and False are legitimate values
            if any(absent(f) for f in REQUIRED_CREATE_FIELDS):
                raise PydanticCustomError(
                    "missing_fields",
                    "Missing required fields: " + ", ".join(REQUIRED_CREATE_FIELDS),
                )
        return data

    @model_validator(mode="after")
    def _check_content(self) -> "ObjectCreate":
        value = self.content
        if self.type == "string":
            if isinstance(value, bool) or not isinstance(value, (str, int, float)):
                raise ValueError("content must be a string for type 'string'")
            self.content = value if isinstance(value, str) else str(value)
        else:
            if isinstance(value, int) and not isinstance(value, bool) and value in (0, 1):
                value = bool(value)
            if not isinstance(value, bool):
                raise ValueError(f"content must be a boolean for type '{self.type}'")
            self.content = value
        return self


class ObjectPatch(CamelModel):
    """Partial record update, merged verbatim (no re-encryption)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: str | None = None
    type: ObjectType | None = None
    content: Any = None
    ttl: int | None = Field(None, ge=0, le=MAX_INSTANT_MS)
    hit_count: int | None = Field(None, ge=0, le=MAX_INSTANT_MS)
    last_hit: int | None = Field(None, ge=0, le=MAX_INSTANT_MS)
    owner_email: str | None = None
    owner_name: str | None = None
    one_time_access: bool | None = None
    totp_secret: str | None = None


class ObjectUpdateRequest(BaseModel):
    id: str | None = None
    updates: ObjectPatch = Field(default_factory=ObjectPatch)


class ToggleRequest(BaseModel):
    name: str | None = None
    token: str | None = None


class AdminCleanupRequest(CamelModel):
    admin_token: str | None = None


class ObjectResponse(CamelModel):
    id: str
    name: str
    type: ObjectType
    content: str  # stored (encrypted) form
    token: str
    ttl: int
    created_at: int
    hit_count: int
    last_hit: int | None
    owner_email: str
    owner_name: str
    one_time_access: bool
    mfa_enabled: bool
    # totpSecret is NEVER returned

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ObjectEnvelope(BaseModel):
    success: bool = True
    object: ObjectResponse


class ObjectListResponse(BaseModel):
    objects: list[ObjectResponse]


class ContentResponse(BaseModel):
    content: Any
    hits: int


class TokenContentResponse(ContentResponse):
    name: str
    type: ObjectType


class DeleteResponse(BaseModel):
    success: bool = True


class SweepResponse(CamelModel):
    success: bool = True
    deleted_count: int
    message: str
