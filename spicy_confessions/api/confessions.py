from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from spicy_confessions.db.base import utcnow
from spicy_confessions.db.session import get_db
from spicy_confessions.schemas.confession_schema import (
    ConfessionCreate,
    ConfessionSubmit,
    ConfessionInDB,
    ConfessionFeedItem,
)
from spicy_confessions.services.confession_service import ConfessionService
from spicy_confessions.services.identity_service import (
    Identity,
    PlatformIdentity,
    get_current_identity,
)
from spicy_confessions.utils.exceptions import ConfessionValidationError, StoreError
from spicy_confessions.utils.pseudonyms import random_pseudonym

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=List[ConfessionFeedItem])
async def get_confessions(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Feed of all confessions, newest first"""
    try:
        confession_service = ConfessionService(db)

        confessions = await confession_service.fetch_confessions()
        liked_ids = await confession_service.likes.get_liked_confession_ids(
            [c.id for c in confessions], identity
        )

        now = utcnow()
        return [
            ConfessionFeedItem(
                **ConfessionInDB.model_validate(confession).model_dump(),
                liked=confession.id in liked_ids,
                age_seconds=max(0, int((now - confession.created_at).total_seconds()))
            )
            for confession in confessions
        ]
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message
        )
    except Exception as e:
        logger.error(f"Get confessions error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load confessions"
        )

@router.post("/", response_model=ConfessionInDB)
async def create_confession(
    submission: ConfessionSubmit,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Post a new confession"""
    try:
        confession_service = ConfessionService(db)

        user_fid = submission.user_fid
        if user_fid is None and isinstance(identity, PlatformIdentity):
            user_fid = identity.fid

        confession_data = ConfessionCreate(
            text=submission.text,
            author=random_pseudonym() if submission.author is None else submission.author,
            user_fid=user_fid,
            is_anonymous=submission.is_anonymous
        )

        confession = await confession_service.create_confession(confession_data)
        return confession
    except ConfessionValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.message
        )
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message
        )
    except Exception as e:
        logger.error(f"Create confession error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create confession"
        )

@router.get("/{confession_id}", response_model=ConfessionInDB)
async def get_confession(
    confession_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Get a confession by ID"""
    try:
        confession_service = ConfessionService(db)
        confession = await confession_service.get_confession(confession_id)

        if not confession:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Confession not found"
            )

        return confession
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get confession error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get confession"
        )
