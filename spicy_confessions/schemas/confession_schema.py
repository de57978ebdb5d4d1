from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

class ConfessionBase(BaseModel):
    text: str
    author: str
    user_fid: Optional[int] = None
    is_anonymous: bool = True

class ConfessionCreate(ConfessionBase):
    pass

class ConfessionSubmit(BaseModel):
    """Request body for the create endpoint; missing fields are filled in by the router"""
    text: str
    author: Optional[str] = None
    user_fid: Optional[int] = None
    is_anonymous: bool = True

class ConfessionInDB(ConfessionBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    like_count: int = 0
    created_at: datetime
    updated_at: datetime

class ConfessionFeedItem(ConfessionInDB):
    liked: bool = False
    age_seconds: int = 0
