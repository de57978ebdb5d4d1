from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from spicy_confessions.db.session import get_db
from spicy_confessions.schemas.like_schema import LikeResponse, LikeStatus, LikeCountReport
from spicy_confessions.services.confession_service import ConfessionService
from spicy_confessions.services.identity_service import Identity, get_current_identity
from spicy_confessions.services.like_service import LikeService
from spicy_confessions.utils.exceptions import (
    AlreadyLikedError,
    ConfessionValidationError,
    StoreError,
)

logger = logging.getLogger(__name__)

router = APIRouter()

async def _require_confession(db: AsyncSession, confession_id: int):
    confession = await ConfessionService(db).get_confession(confession_id)
    if not confession:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Confession not found"
        )
    return confession

@router.post("/confessions/{confession_id}", response_model=LikeResponse)
async def like_confession(
    confession_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Like a confession"""
    try:
        like_service = LikeService(db)

        await _require_confession(db, confession_id)

        like = await like_service.like_confession(confession_id, identity)

        logger.info(f"{identity} liked confession {confession_id}")

        return like

    except HTTPException:
        raise
    except AlreadyLikedError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=e.message
        )
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
        logger.error(f"Error liking confession: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to like confession"
        )

@router.delete("/confessions/{confession_id}")
async def unlike_confession(
    confession_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Unlike a confession"""
    try:
        like_service = LikeService(db)

        await _require_confession(db, confession_id)

        deleted = await like_service.unlike_confession(confession_id, identity)

        if not deleted:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Confession not liked"
            )

        logger.info(f"{identity} unliked confession {confession_id}")

        return {"message": "Successfully unliked confession"}

    except HTTPException:
        raise
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
        logger.error(f"Error unliking confession: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to unlike confession"
        )

@router.get("/confessions/{confession_id}", response_model=LikeStatus)
async def get_like_status(
    confession_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Whether the current identity liked a confession, with its like count"""
    try:
        like_service = LikeService(db)

        await _require_confession(db, confession_id)

        return LikeStatus(
            confession_id=confession_id,
            liked=await like_service.has_user_liked(confession_id, identity),
            like_count=await like_service.count_likes(confession_id)
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting like status: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get like status"
        )

@router.post("/recalculate", response_model=LikeCountReport)
async def recalculate_like_counts(
    db: AsyncSession = Depends(get_db)
):
    """Fix like counts: rewrite every stored counter from the likes table"""
    try:
        like_service = LikeService(db)

        like_counts = await like_service.recalculate_like_counts()

        return LikeCountReport(
            total_confessions=len(like_counts),
            like_counts=like_counts
        )

    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message
        )
    except Exception as e:
        logger.error(f"Error recalculating like counts: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to recalculate like counts"
        )
