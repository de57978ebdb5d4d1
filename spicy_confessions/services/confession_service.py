from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from sqlalchemy.exc import SQLAlchemyError
import logging

from spicy_confessions.config import settings
from spicy_confessions.models.confession import Confession
from spicy_confessions.schemas.confession_schema import ConfessionCreate
from spicy_confessions.services.like_service import LikeService
from spicy_confessions.utils.exceptions import ConfessionValidationError, StoreError

logger = logging.getLogger(__name__)

def validate_confession(confession_data: ConfessionCreate) -> ConfessionCreate:
    """Trim text and author, rejecting empty or over-long input"""
    text = (confession_data.text or "").strip()
    author = (confession_data.author or "").strip()

    if not text:
        raise ConfessionValidationError("Confession text cannot be empty", field="text")

    if len(text) > settings.MAX_CONFESSION_LENGTH:
        raise ConfessionValidationError(
            f"Confession text cannot exceed {settings.MAX_CONFESSION_LENGTH} characters",
            field="text"
        )

    if not author:
        raise ConfessionValidationError("Author name is required", field="author")

    return confession_data.model_copy(update={"text": text, "author": author})

class ConfessionService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.likes = LikeService(db)

    async def create_confession(self, confession_data: ConfessionCreate) -> Confession:
        """Create a new confession"""
        confession_data = validate_confession(confession_data)

        confession = Confession(
            text=confession_data.text,
            author=confession_data.author,
            user_fid=confession_data.user_fid or None,
            is_anonymous=confession_data.is_anonymous,
            like_count=0
        )

        try:
            self.db.add(confession)
            await self.db.commit()
            await self.db.refresh(confession)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error creating confession: {e}")
            raise StoreError(f"Failed to create confession: {e}") from e

        if confession.id is None:
            raise StoreError("No data returned from confession creation")

        logger.info(f"Created confession {confession.id} by {confession.author!r}")

        return confession

    async def get_confession(self, confession_id: int) -> Optional[Confession]:
        """Get a confession by ID"""
        try:
            stmt = select(Confession).where(Confession.id == confession_id)
            result = await self.db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching confession {confession_id}: {e}")
            raise StoreError(f"Failed to fetch confession: {e}") from e

    async def fetch_confessions(self) -> List[Confession]:
        """
        All confessions, newest first.

        Every read also repairs the denormalized like_count: the stored value
        is compared with the live like count and overwritten on mismatch, so
        the rows returned (and the rows in the database) carry true counts.
        """
        try:
            stmt = select(Confession).order_by(
                desc(Confession.created_at),
                desc(Confession.id)
            ).execution_options(populate_existing=True)
            result = await self.db.execute(stmt)
            confessions = list(result.scalars().all())

            if not confessions:
                return confessions

            live_counts = await self.likes.live_like_counts([c.id for c in confessions])

            repaired = 0
            for confession in confessions:
                live_count = live_counts.get(confession.id, 0)
                if confession.like_count != live_count:
                    logger.info(
                        f"Fixing like count for confession {confession.id}: "
                        f"{confession.like_count} -> {live_count}"
                    )
                    confession.like_count = live_count
                    repaired += 1

            if repaired:
                await self.db.commit()

            return confessions

        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error fetching confessions: {e}")
            raise StoreError(f"Failed to fetch confessions: {e}") from e
