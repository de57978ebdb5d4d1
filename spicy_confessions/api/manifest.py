from fastapi import APIRouter
from fastapi.responses import JSONResponse
from typing import Any, Dict

from spicy_confessions.config import Settings, settings

router = APIRouter()

def build_manifest(config: Settings) -> Dict[str, Any]:
    """Mini-app manifest the host reads from /.well-known/farcaster.json"""
    app_url = config.APP_URL.rstrip("/")
    icon_url = f"{app_url}/icon.png"

    manifest: Dict[str, Any] = {
        "miniapp": {
            "name": config.APP_NAME,
            "version": "1",
            "iconUrl": icon_url,
            "homeUrl": app_url,
            "imageUrl": icon_url,
            "buttonTitle": "Share Confession",
            "splashImageUrl": icon_url,
            "splashBackgroundColor": config.APP_SPLASH_BACKGROUND,
            "subtitle": config.APP_SUBTITLE,
            "description": config.APP_DESCRIPTION,
            "primaryCategory": config.APP_PRIMARY_CATEGORY,
            "screenshotUrls": [f"{app_url}/header.png"],
            "heroImageUrl": icon_url,
            "tags": list(config.APP_TAGS),
            "tagline": config.APP_TAGLINE,
            "ogTitle": config.APP_NAME,
            "ogDescription": config.APP_DESCRIPTION,
            "ogImageUrl": icon_url,
        }
    }

    association = (
        config.ACCOUNT_ASSOCIATION_HEADER,
        config.ACCOUNT_ASSOCIATION_PAYLOAD,
        config.ACCOUNT_ASSOCIATION_SIGNATURE,
    )
    if all(association):
        header, payload, signature = association
        manifest["accountAssociation"] = {
            "header": header,
            "payload": payload,
            "signature": signature,
        }

    return manifest

@router.get("/farcaster.json")
async def get_manifest():
    """Static manifest describing the mini-app to its host"""
    return JSONResponse(
        content=build_manifest(settings),
        headers={"Cache-Control": f"public, max-age={settings.MANIFEST_CACHE_SECONDS}"}
    )
