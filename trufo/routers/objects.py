"""Object endpoints: create, fetch, toggle, update, delete, owner listing."""

from fastapi import APIRouter, Depends, Query

from trufo.dependencies import get_access_service
from trufo.errors import ValidationError
from trufo.schemas.stored_object import (
    ContentResponse,
    DeleteResponse,
    ObjectCreate,
    ObjectEnvelope,
    ObjectListResponse,
    ObjectResponse,
    ObjectUpdateRequest,
    TokenContentResponse,
    ToggleRequest,
)
from trufo.services.access_service import AccessService

router = APIRouter()


@router.post("/objects", response_model=ObjectEnvelope, status_code=201)
async def create_object(data: ObjectCreate, service: AccessService = Depends(get_access_service)):
    record = await service.create(data)
    return ObjectEnvelope(object=ObjectResponse.model_validate(record))


@router.get("/objects", response_model=ContentResponse)
async def get_object(
    name: str | None = None,
    token: str | None = None,
    totp_code: str | None = Query(None, alias="totpCode"),
    service: AccessService = Depends(get_access_service),
):
    if not name or not token:
        raise ValidationError("Name and token are required")
    result = await service.fetch(name, token, totp_code)
    return ContentResponse(content=result.content, hits=result.hits)


@router.get("/object", response_model=TokenContentResponse)
async def get_object_by_token(
    token: str | None = None,
    totp_code: str | None = Query(None, alias="totpCode"),
    service: AccessService = Depends(get_access_service),
):
    if not token:
        raise ValidationError("Token is required")
    result = await service.fetch_by_token(token, totp_code)
    return TokenContentResponse(
        name=result.name, type=result.type, content=result.content, hits=result.hits
    )


@router.get("/user-objects", response_model=ObjectListResponse)
async def get_user_objects(
    email: str | None = None, service: AccessService = Depends(get_access_service)
):
    if not email:
        raise ValidationError("Email is required")
    records = await service.list_by_owner(email)
    return ObjectListResponse(objects=[ObjectResponse.model_validate(r) for r in records])


@router.put("/objects", response_model=ObjectEnvelope)
async def update_object(
    body: ObjectUpdateRequest, service: AccessService = Depends(get_access_service)
):
    if not body.id:
        raise ValidationError("Object ID is required")
    record = await service.update(body.id, body.updates)
    return ObjectEnvelope(object=ObjectResponse.model_validate(record))


@router.delete("/objects", response_model=DeleteResponse)
async def delete_object(id: str | None = None, service: AccessService = Depends(get_access_service)):
    if not id:
        raise ValidationError("Object ID is required")
    await service.delete(id)
    return DeleteResponse()


@router.post("/toggle", response_model=ContentResponse)
async def toggle_object(body: ToggleRequest, service: AccessService = Depends(get_access_service)):
    if not body.name or not body.token:
        raise ValidationError("Name and token are required")
    result = await service.toggle(body.name, body.token)
    return ContentResponse(content=result.content, hits=result.hits)
