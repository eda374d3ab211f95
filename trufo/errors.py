"""Error taxonomy shared by the access core and the HTTP layer."""

from __future__ import annotations


class TrufoError(Exception):
    status_code = 500
    kind = "internal_error"
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def to_body(self) -> dict:
        return {"error": self.detail, "kind": self.kind}


class ValidationError(TrufoError):
    status_code = 400
    kind = "validation_error"
    default_detail = "Invalid request"


class InvalidOperation(TrufoError):
    status_code = 400
    kind = "invalid_operation"
    default_detail = "Operation not supported for this object type"


class NotFound(TrufoError):
    status_code = 404
    kind = "not_found"
    default_detail = "Object not found or invalid token"


class Expired(TrufoError):
    """Raised after the expired record has already been deleted."""

    status_code = 410
    kind = "expired"
    default_detail = "Object has expired"


class Forbidden(TrufoError):
    status_code = 403
    kind = "forbidden"
    default_detail = "Invalid admin token"


class MFARequired(TrufoError):
    status_code = 403
    kind = "mfa_required"
    default_detail = "TOTP verification required"

    def __init__(self, detail: str | None = None, totp_qr: str | None = None):
        super().__init__(detail)
        self.totp_qr = totp_qr

    def to_body(self) -> dict:
        body = super().to_body()
        body["requiresTOTP"] = True
        if self.totp_qr:
            body["totpQR"] = self.totp_qr
        return body


class MFAInvalid(TrufoError):
    status_code = 403
    kind = "mfa_invalid"
    default_detail = "Invalid TOTP code"

    def to_body(self) -> dict:
        body = super().to_body()
        body["requiresTOTP"] = True
        return body


class StorageUnavailable(TrufoError):
    status_code = 500
    kind = "storage_unavailable"
    default_detail = "Storage unavailable"
