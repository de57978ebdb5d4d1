"""
Who is the current user?

A user is either known to the embedding platform (a numeric fid) or is an
anonymous browser carrying a synthesized identifier in a cookie. The two are
modelled as separate types so a like can never be recorded under both.
"""
from dataclasses import dataclass
from typing import Optional, Union, Protocol
from fastapi import Depends, HTTPException, Request, Response, status
from pydantic import ValidationError
import random
import logging

from spicy_confessions.config import settings
from spicy_confessions.schemas.identity_schema import PlatformContext, IdentityResponse

logger = logging.getLogger(__name__)

STORAGE_KEY = "spicy_confessions_user_id"
SALT_RANGE = 1_000_000


@dataclass(frozen=True)
class PlatformIdentity:
    fid: int


@dataclass(frozen=True)
class AnonymousIdentity:
    identifier: str


Identity = Union[PlatformIdentity, AnonymousIdentity]


@dataclass(frozen=True)
class EnvironmentSignals:
    """Stable client traits the anonymous fingerprint is derived from"""
    user_agent: str = ""
    screen: str = ""
    language: str = ""
    timezone: str = ""

    @classmethod
    def from_request(cls, request: Request) -> "EnvironmentSignals":
        headers = request.headers
        accept_language = headers.get("accept-language", "")
        return cls(
            user_agent=headers.get("user-agent", ""),
            screen=headers.get(settings.SCREEN_HEADER, ""),
            language=accept_language.split(",")[0].split(";")[0].strip(),
            timezone=headers.get(settings.TIMEZONE_HEADER, ""),
        )

    def fingerprint_source(self) -> str:
        return f"{self.user_agent}-{self.screen}-{self.language}-{self.timezone}"


class IdentityStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class CookieStore:
    """Client-side storage backed by a cookie: read from the request, written on the response"""

    def __init__(self, request: Request, response: Response):
        self.request = request
        self.response = response

    def _cookie_name(self, key: str) -> str:
        return settings.IDENTITY_COOKIE_NAME if key == STORAGE_KEY else key

    def get(self, key: str) -> Optional[str]:
        return self.request.cookies.get(self._cookie_name(key))

    def set(self, key: str, value: str) -> None:
        self.response.set_cookie(
            self._cookie_name(key),
            value,
            max_age=settings.IDENTITY_COOKIE_MAX_AGE,
            httponly=True,
            samesite=settings.IDENTITY_COOKIE_SAMESITE,
            secure=settings.IDENTITY_COOKIE_SECURE,
        )


def fingerprint_hash(value: str) -> int:
    """
    32-bit string hash (h * 31 + c), wrapped to signed and returned as its absolute value.

    c runs over UTF-16 code units, so characters outside the BMP contribute
    their surrogate pair, the same as a browser computing it in JavaScript.
    """
    data = value.encode("utf-16-le")
    h = 0
    for i in range(0, len(data), 2):
        unit = int.from_bytes(data[i:i + 2], "little")
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def generate_user_identifier(
    signals: EnvironmentSignals,
    store: Optional[IdentityStore] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Return the stored anonymous identifier, creating one if needed.

    A missing or failing store is not an error: the identifier is still
    returned, it just won't survive the session.
    """
    if store is not None:
        try:
            existing = store.get(STORAGE_KEY)
            if existing:
                return existing
        except Exception as e:
            logger.warning(f"Identity storage not available: {e}")

    rng = rng or random
    identifier = f"anon_{fingerprint_hash(signals.fingerprint_source())}_{rng.randrange(SALT_RANGE)}"

    if store is not None:
        try:
            store.set(STORAGE_KEY, identifier)
        except Exception as e:
            logger.warning(f"Could not persist anonymous identifier: {e}")

    return identifier


def resolve_identity(
    context: Optional[PlatformContext],
    signals: EnvironmentSignals,
    store: Optional[IdentityStore] = None,
) -> Identity:
    """Prefer the platform fid; fall back to the anonymous identifier"""
    if context is not None and context.user is not None:
        return PlatformIdentity(fid=context.user.fid)
    return AnonymousIdentity(identifier=generate_user_identifier(signals, store))


def identity_columns(identity: Identity) -> dict:
    """Column values for a like row; the unused column is always NULL"""
    if isinstance(identity, PlatformIdentity):
        return {"user_fid": identity.fid, "user_identifier": None}
    return {"user_fid": None, "user_identifier": identity.identifier}


def to_identity_response(identity: Identity) -> IdentityResponse:
    if isinstance(identity, PlatformIdentity):
        return IdentityResponse(kind="platform", user_fid=identity.fid)
    return IdentityResponse(kind="anonymous", user_identifier=identity.identifier)


def get_platform_context(request: Request) -> Optional[PlatformContext]:
    """Read the host-supplied fid header, rejecting anything that isn't a positive integer"""
    raw_fid = request.headers.get(settings.PLATFORM_FID_HEADER)
    if not raw_fid:
        return None

    try:
        return PlatformContext.model_validate({"user": {"fid": raw_fid.strip()}})
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid {settings.PLATFORM_FID_HEADER} header"
        )


async def get_current_identity(
    request: Request,
    response: Response,
    context: Optional[PlatformContext] = Depends(get_platform_context),
) -> Identity:
    """Dependency resolving the caller's identity"""
    return resolve_identity(
        context,
        EnvironmentSignals.from_request(request),
        CookieStore(request, response),
    )
