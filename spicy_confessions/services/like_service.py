from typing import List, Optional, Dict, Iterable, Set
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import logging

from spicy_confessions.models.confession import Confession
from spicy_confessions.models.confession_like import ConfessionLike
from spicy_confessions.services.identity_service import (
    Identity,
    PlatformIdentity,
    identity_columns,
)
from spicy_confessions.utils.exceptions import (
    AlreadyLikedError,
    IdentityRequiredError,
    StoreError,
)

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

def is_unique_violation(error: IntegrityError) -> bool:
    """True when the integrity error came from a unique constraint"""
    orig = error.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is not None:
        return code == UNIQUE_VIOLATION
    if getattr(orig, "sqlite_errorname", None) == "SQLITE_CONSTRAINT_UNIQUE":
        return True
    return "UNIQUE constraint failed" in str(orig)

def identity_filter(identity: Identity) -> list:
    """Match rows liked under this identity only, never under the other kind"""
    if isinstance(identity, PlatformIdentity):
        return [
            ConfessionLike.user_fid == identity.fid,
            ConfessionLike.user_identifier.is_(None),
        ]
    return [
        ConfessionLike.user_identifier == identity.identifier,
        ConfessionLike.user_fid.is_(None),
    ]

class LikeService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def like_confession(self, confession_id: int, identity: Optional[Identity]) -> ConfessionLike:
        """Record a like; a second like from the same identity raises AlreadyLikedError"""
        if identity is None:
            raise IdentityRequiredError()

        like = ConfessionLike(confession_id=confession_id, **identity_columns(identity))

        try:
            self.db.add(like)
            await self.db.commit()
            await self.db.refresh(like)
        except IntegrityError as e:
            await self.db.rollback()
            if is_unique_violation(e):
                logger.info(f"Duplicate like ignored: confession={confession_id}, identity={identity}")
                raise AlreadyLikedError(confession_id) from e
            logger.error(f"Error liking confession: {e}")
            raise StoreError(f"Failed to like confession: {e.orig}") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error liking confession: {e}")
            raise StoreError(f"Failed to like confession: {e}") from e

        await self._refresh_like_count(confession_id)

        logger.info(f"Created like: confession={confession_id}, identity={identity}")

        return like

    async def unlike_confession(self, confession_id: int, identity: Optional[Identity]) -> bool:
        """Remove the identity's like; returns False when there was nothing to remove"""
        if identity is None:
            raise IdentityRequiredError()

        try:
            stmt = delete(ConfessionLike).where(
                ConfessionLike.confession_id == confession_id,
                *identity_filter(identity)
            )
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error unliking confession: {e}")
            raise StoreError(f"Failed to unlike confession: {e}") from e

        removed = result.rowcount > 0
        if removed:
            await self._refresh_like_count(confession_id)
            logger.info(f"Deleted like: confession={confession_id}, identity={identity}")

        return removed

    async def has_user_liked(self, confession_id: int, identity: Optional[Identity]) -> bool:
        """Check if the identity liked a confession; any doubt answers False"""
        if identity is None:
            return False

        try:
            stmt = select(ConfessionLike.id).where(
                ConfessionLike.confession_id == confession_id,
                *identity_filter(identity)
            ).limit(1)
            result = await self.db.execute(stmt)
            return result.scalar_one_or_none() is not None

        except Exception as e:
            logger.error(f"Error checking like status: {e}")
            return False

    async def get_liked_confession_ids(
        self,
        confession_ids: Iterable[int],
        identity: Optional[Identity]
    ) -> Set[int]:
        """Batched has_user_liked for a feed page"""
        confession_ids = list(confession_ids)
        if identity is None or not confession_ids:
            return set()

        try:
            stmt = select(ConfessionLike.confession_id).where(
                ConfessionLike.confession_id.in_(confession_ids),
                *identity_filter(identity)
            )
            result = await self.db.execute(stmt)
            return set(result.scalars().all())

        except Exception as e:
            logger.error(f"Error checking like status: {e}")
            return set()

    async def count_likes(self, confession_id: int) -> int:
        """Live like count for one confession"""
        counts = await self.live_like_counts([confession_id])
        return counts.get(confession_id, 0)

    async def live_like_counts(self, confession_ids: Optional[List[int]] = None) -> Dict[int, int]:
        """
        Count like rows per confession in a single grouped query.

        Confessions without likes are absent from the result. Passing None
        counts every confession.
        """
        stmt = select(
            ConfessionLike.confession_id,
            func.count(ConfessionLike.id)
        ).group_by(ConfessionLike.confession_id)

        if confession_ids is not None:
            if not confession_ids:
                return {}
            stmt = stmt.where(ConfessionLike.confession_id.in_(confession_ids))

        result = await self.db.execute(stmt)
        return {confession_id: count for confession_id, count in result.all()}

    async def sync_like_count(self, confession_id: int) -> int:
        """Overwrite one confession's stored counter with its live count"""
        try:
            live_count = await self.count_likes(confession_id)
            await self.db.execute(
                update(Confession)
                .where(Confession.id == confession_id)
                .values(like_count=live_count)
            )
            await self.db.commit()
            return live_count

        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error updating like count for confession {confession_id}: {e}")
            raise StoreError(f"Failed to update like count: {e}") from e

    async def _refresh_like_count(self, confession_id: int) -> None:
        # The like row is already committed; a stale counter is repaired by the next feed read
        try:
            await self.sync_like_count(confession_id)
        except StoreError as e:
            logger.warning(f"Like count for confession {confession_id} left stale: {e.message}")

    async def recalculate_like_counts(self) -> Dict[int, int]:
        """Recompute and overwrite the counter of every confession"""
        try:
            result = await self.db.execute(select(Confession.id))
            confession_ids = list(result.scalars().all())
            live_counts = await self.live_like_counts()

            like_counts = {}
            for confession_id in confession_ids:
                like_count = live_counts.get(confession_id, 0)
                await self.db.execute(
                    update(Confession)
                    .where(Confession.id == confession_id)
                    .values(like_count=like_count)
                )
                like_counts[confession_id] = like_count

            await self.db.commit()

        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error in recalculate_like_counts: {e}")
            raise StoreError(f"Failed to recalculate like counts: {e}") from e

        logger.info(f"Recalculated like counts for {len(like_counts)} confessions")

        return like_counts
