"""
Athlete profile API.

One profile per user. It feeds every AI prompt, so generate-program and
weekly-digest refuse to run until it exists.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from core.database import get_db
from core.auth import get_current_user
from core.exceptions import NotFoundError
from models import AthleteProfile, User
from schemas import AthleteProfileResponse, AthleteProfileUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/profile", tags=["profile"])

NON_NULLABLE_FIELDS = {"language", "onboarding_completed"}


@router.get("", response_model=AthleteProfileResponse)
def get_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    profile = db.query(AthleteProfile).filter(AthleteProfile.user_id == current_user.id).first()
    if not profile:
        raise NotFoundError("Profile not found")
    return profile


@router.put("", response_model=AthleteProfileResponse)
def upsert_profile(
    payload: AthleteProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create the profile on first call; afterwards update only the fields sent."""
    profile = db.query(AthleteProfile).filter(AthleteProfile.user_id == current_user.id).first()
    created = profile is None
    if created:
        profile = AthleteProfile(user_id=current_user.id)
        db.add(profile)

    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is None and key in NON_NULLABLE_FIELDS:
            continue
        setattr(profile, key, value)

    db.flush()
    db.refresh(profile)

    logger.info(
        f"Profile {'created' if created else 'updated'} for user {current_user.id}",
        extra={"extra_fields": {"fields": sorted(payload.model_dump(exclude_unset=True).keys())}},
    )
    return profile
