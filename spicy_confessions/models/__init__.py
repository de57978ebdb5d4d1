"""
Models package for Spicy Confessions API
"""
from spicy_confessions.db.base import Base, BaseModel
from spicy_confessions.models.confession import Confession
from spicy_confessions.models.confession_like import ConfessionLike

__all__ = [
    'Base',
    'BaseModel',
    'Confession',
    'ConfessionLike',
]
