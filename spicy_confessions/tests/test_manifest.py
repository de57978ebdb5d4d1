import random

from spicy_confessions.api.manifest import build_manifest
from spicy_confessions.config import Settings
from spicy_confessions.utils.pseudonyms import ACTORS, PREFIXES, random_pseudonym

def test_manifest_includes_account_association_when_configured():
    config = Settings(
        APP_URL="https://example.test/",
        ACCOUNT_ASSOCIATION_HEADER="header",
        ACCOUNT_ASSOCIATION_PAYLOAD="payload",
        ACCOUNT_ASSOCIATION_SIGNATURE="signature",
    )

    manifest = build_manifest(config)

    assert manifest["accountAssociation"] == {
        "header": "header",
        "payload": "payload",
        "signature": "signature",
    }
    assert manifest["miniapp"]["homeUrl"] == "https://example.test"
    assert manifest["miniapp"]["screenshotUrls"] == ["https://example.test/header.png"]

def test_manifest_skips_partial_account_association():
    config = Settings(ACCOUNT_ASSOCIATION_HEADER="header")

    assert "accountAssociation" not in build_manifest(config)

def test_random_pseudonym_shape():
    name = random_pseudonym(random.Random(3))

    prefix = next(p for p in PREFIXES if name.startswith(p + " "))
    assert name[len(prefix) + 1:] in ACTORS
