from sqlalchemy import Column, Integer, BigInteger, String, ForeignKey, CheckConstraint, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from spicy_confessions.db.base import BaseModel

class ConfessionLike(BaseModel):
    __tablename__ = "confession_likes"

    confession_id = Column(Integer, ForeignKey("confessions.id", ondelete="CASCADE"), nullable=False)
    user_fid = Column(BigInteger, nullable=True)
    user_identifier = Column(String(255), nullable=True)

    # Relationships
    confession = relationship("Confession", back_populates="likes")

    __table_args__ = (
        # One like per identity per confession
        UniqueConstraint('confession_id', 'user_fid', name='unique_fid_confession_like'),
        UniqueConstraint('confession_id', 'user_identifier', name='unique_identifier_confession_like'),

        # Liked either as a platform user or anonymously, never both
        CheckConstraint(
            '(user_fid IS NOT NULL AND user_identifier IS NULL) OR (user_fid IS NULL AND user_identifier IS NOT NULL)',
            name='check_like_identity'
        ),

        Index('ix_confession_likes_confession_id', 'confession_id'),
        Index('ix_confession_likes_created_at', 'created_at'),
    )

    @property
    def liker_identifier(self) -> str:
        """Identity the like was recorded under"""
        return str(self.user_fid) if self.user_fid is not None else self.user_identifier

    def __repr__(self):
        return f"<ConfessionLike(id={self.id}, confession_id={self.confession_id}, liker={self.liker_identifier!r})>"
