"""Administrative endpoints guarded by the static admin token."""

import hmac

from fastapi import APIRouter, Depends, Query

from trufo.config import Settings
from trufo.dependencies import get_access_service, get_settings
from trufo.errors import Forbidden
from trufo.schemas.stored_object import (
    AdminCleanupRequest,
    ObjectListResponse,
    ObjectResponse,
    SweepResponse,
)
from trufo.services.access_service import AccessService

router = APIRouter()


def _require_admin(settings: Settings, admin_token: str | None) -> None:
    if not settings.admin_token or not admin_token:
        raise Forbidden()
    if not hmac.compare_digest(settings.admin_token.encode(), admin_token.encode()):
        raise Forbidden()


@router.get("/objects", response_model=ObjectListResponse)
async def list_all_objects(
    admin_token: str | None = Query(None, alias="adminToken"),
    settings: Settings = Depends(get_settings),
    service: AccessService = Depends(get_access_service),
):
    _require_admin(settings, admin_token)
    records = await service.list_all()
    return ObjectListResponse(objects=[ObjectResponse.model_validate(r) for r in records])


@router.post("/cleanup", response_model=SweepResponse)
async def cleanup_expired(
    body: AdminCleanupRequest,
    settings: Settings = Depends(get_settings),
    service: AccessService = Depends(get_access_service),
):
    _require_admin(settings, body.admin_token)
    deleted = await service.sweep_expired()
    return SweepResponse(deleted_count=deleted, message=f"Cleaned up {deleted} expired objects")
