"""Per-request wiring of the access engine."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from trufo.config import Settings
from trufo.database import get_db
from trufo.services.access_service import AccessService
from trufo.services.object_repository import ObjectRepository


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_access_service(request: Request, db: AsyncSession = Depends(get_db)) -> AccessService:
    settings: Settings = request.app.state.settings
    return AccessService(
        ObjectRepository(db),
        request.app.state.codec,
        clock=request.app.state.clock,
        token_length=settings.token_length,
        totp_issuer=settings.totp_issuer,
    )
