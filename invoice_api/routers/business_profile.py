import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from ..auth import get_current_user
from ..config import settings
from ..database import DatabaseClient, get_db
from ..profiles import build_profile, merge_profile
from ..models import APIResponse
from ..uploads import PROFILE_ASSET_FIELDS, read_payload, stored_uploads

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/businessProfile",
    tags=["business profile"]
)


@router.get("/me", response_model=APIResponse)
async def get_my_profile(
    owner: str = Depends(get_current_user),
    db: DatabaseClient = Depends(get_db),
):
    profile = db.get_profile(owner)
    if not profile:
        raise HTTPException(status_code=404, detail="Business profile not found")
    return APIResponse(success=True, data=profile)


@router.post("", response_model=APIResponse, status_code=201)
async def create_profile(
    request: Request,
    owner: str = Depends(get_current_user),
    db: DatabaseClient = Depends(get_db),
):
    if db.get_profile(owner):
        raise HTTPException(status_code=409, detail="Business profile already exists")

    body, files = await read_payload(request)
    try:
        profile = build_profile(owner, body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    with stored_uploads(files, PROFILE_ASSET_FIELDS, settings.upload_dir, settings.public_url) as file_urls:
        profile.update(file_urls)
        created = db.insert_profile(profile)

    logger.info("Created business profile for %s", owner)
    return APIResponse(success=True, message="Business profile created", data=created)


@router.put("/me", response_model=APIResponse)
async def update_my_profile(
    request: Request,
    owner: str = Depends(get_current_user),
    db: DatabaseClient = Depends(get_db),
):
    existing = db.get_profile(owner)
    if not existing:
        raise HTTPException(status_code=404, detail="Business profile not found")

    body, files = await read_payload(request)
    try:
        profile = merge_profile(existing, body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    with stored_uploads(files, PROFILE_ASSET_FIELDS, settings.upload_dir, settings.public_url) as file_urls:
        profile.update(file_urls)
        updated = db.update_profile(owner, profile)
        if not updated:
            raise HTTPException(status_code=404, detail="Business profile not found")

    logger.info("Updated business profile for %s", owner)
    return APIResponse(success=True, message="Business profile updated", data=updated)
