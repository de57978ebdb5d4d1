from pydantic import BaseModel, PositiveInt
from typing import Optional, Literal

class PlatformUser(BaseModel):
    fid: PositiveInt

class PlatformContext(BaseModel):
    """The part of the host's mini-app context this service reads"""
    user: Optional[PlatformUser] = None

class IdentityResponse(BaseModel):
    kind: Literal["platform", "anonymous"]
    user_fid: Optional[int] = None
    user_identifier: Optional[str] = None

class PseudonymResponse(BaseModel):
    author: str
