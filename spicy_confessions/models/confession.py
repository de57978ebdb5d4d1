from sqlalchemy import Column, Text, Integer, BigInteger, Boolean, DateTime, CheckConstraint, Index
from sqlalchemy.orm import relationship
from spicy_confessions.db.base import BaseModel, utcnow

class Confession(BaseModel):
    __tablename__ = "confessions"

    text = Column(Text, nullable=False)
    author = Column(Text, nullable=False)
    user_fid = Column(BigInteger, nullable=True)
    is_anonymous = Column(Boolean, default=True, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    likes = relationship("ConfessionLike", back_populates="confession", cascade="all, delete-orphan")

    # Denormalized for cheap feed rendering, repaired from confession_likes
    like_count = Column(Integer, default=0, nullable=False)

    __table_args__ = (
        CheckConstraint('like_count >= 0', name='check_like_count_non_negative'),
        Index('ix_confessions_created_at', 'created_at'),
        Index('ix_confessions_user_fid', 'user_fid'),
    )

    def __repr__(self):
        return f"<Confession(id={self.id}, author={self.author!r}, like_count={self.like_count})>"
