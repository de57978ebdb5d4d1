from pydantic import BaseModel, ConfigDict
from typing import Optional, Dict
from datetime import datetime

class LikeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    confession_id: int
    user_fid: Optional[int] = None
    user_identifier: Optional[str] = None
    created_at: datetime

class LikeStatus(BaseModel):
    confession_id: int
    liked: bool
    like_count: int

class LikeCountReport(BaseModel):
    total_confessions: int
    like_counts: Dict[int, int]
