from fastapi import APIRouter, Depends
import logging

from spicy_confessions.schemas.identity_schema import IdentityResponse, PseudonymResponse
from spicy_confessions.services.identity_service import (
    Identity,
    get_current_identity,
    to_identity_response,
)
from spicy_confessions.utils.pseudonyms import random_pseudonym

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/me", response_model=IdentityResponse)
async def get_me(identity: Identity = Depends(get_current_identity)):
    """Identity likes are recorded under for this client"""
    return to_identity_response(identity)

@router.get("/pseudonym", response_model=PseudonymResponse)
async def get_pseudonym():
    """A fresh display name for the composer"""
    return PseudonymResponse(author=random_pseudonym())
