import pytest
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from spicy_confessions.models.confession import Confession
from spicy_confessions.models.confession_like import ConfessionLike
from spicy_confessions.schemas.confession_schema import ConfessionCreate
from spicy_confessions.services.confession_service import ConfessionService
from spicy_confessions.utils.exceptions import ConfessionValidationError, StoreError

async def stored_like_count(db, confession_id: int) -> int:
    result = await db.execute(select(Confession.like_count).where(Confession.id == confession_id))
    return result.scalar_one()

@pytest.mark.asyncio
async def test_create_confession_trims_and_defaults(test_db):
    """Test creating a confession"""
    confession_service = ConfessionService(test_db)

    confession = await confession_service.create_confession(
        ConfessionCreate(text="  hello  ", author="  Anon Keanu Reeves ")
    )

    assert confession.id is not None
    assert confession.text == "hello"
    assert confession.author == "Anon Keanu Reeves"
    assert confession.is_anonymous is True
    assert confession.user_fid is None
    assert confession.like_count == 0
    assert confession.created_at is not None
    assert confession.updated_at is not None

@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   ", "x" * 501])
async def test_create_confession_rejects_bad_text(test_db, text):
    confession_service = ConfessionService(test_db)

    with pytest.raises(ConfessionValidationError) as exc_info:
        await confession_service.create_confession(ConfessionCreate(text=text, author="Agent Zendaya"))

    assert exc_info.value.field == "text"

@pytest.mark.asyncio
async def test_create_confession_accepts_exactly_500_chars(test_db):
    confession_service = ConfessionService(test_db)

    confession = await confession_service.create_confession(
        ConfessionCreate(text="x" * 500, author="Agent Zendaya")
    )

    assert len(confession.text) == 500

@pytest.mark.asyncio
async def test_create_confession_requires_author(test_db):
    confession_service = ConfessionService(test_db)

    with pytest.raises(ConfessionValidationError) as exc_info:
        await confession_service.create_confession(ConfessionCreate(text="hello", author="  "))

    assert exc_info.value.field == "author"

@pytest.mark.asyncio
async def test_long_author_is_stored_in_full(test_db):
    author = "Secret Admirer of " + "Keanu Reeves " * 20

    confession = await ConfessionService(test_db).create_confession(
        ConfessionCreate(text="hello", author=author)
    )

    assert confession.author == author.strip()
    # no varchar limit for postgres to enforce after validation passed
    assert getattr(Confession.__table__.c.author.type, "length", None) is None

@pytest.mark.asyncio
async def test_validation_happens_before_any_database_call():
    db = AsyncMock()
    db.add = MagicMock()

    with pytest.raises(ConfessionValidationError):
        await ConfessionService(db).create_confession(ConfessionCreate(text="", author="Anon"))

    db.add.assert_not_called()
    db.commit.assert_not_awaited()

@pytest.mark.asyncio
async def test_create_confession_wraps_store_failure():
    db = AsyncMock()
    db.add = MagicMock()
    db.commit.side_effect = OperationalError("INSERT", {}, Exception("connection lost"))

    with pytest.raises(StoreError) as exc_info:
        await ConfessionService(db).create_confession(ConfessionCreate(text="hello", author="Anon"))

    assert "Failed to create confession" in exc_info.value.message
    db.rollback.assert_awaited_once()

@pytest.mark.asyncio
async def test_fetch_confessions_newest_first(test_db):
    confession_service = ConfessionService(test_db)

    first = await confession_service.create_confession(ConfessionCreate(text="first", author="Secret Tom Cruise"))
    second = await confession_service.create_confession(ConfessionCreate(text="second", author="Agent Emma Stone"))

    confessions = await confession_service.fetch_confessions()

    assert [c.id for c in confessions] == [second.id, first.id]

@pytest.mark.asyncio
async def test_fetch_confessions_empty(test_db):
    assert await ConfessionService(test_db).fetch_confessions() == []

@pytest.mark.asyncio
async def test_fetch_confessions_repairs_drifted_counts(test_db):
    """Counters that disagree with the likes table are fixed and persisted"""
    over = Confession(text="over-counted", author="Anon Gal Gadot", like_count=5)
    under = Confession(text="under-counted", author="Anon Pedro Pascal", like_count=0)
    exact = Confession(text="exact", author="Anon Viola Davis", like_count=1)
    test_db.add_all([over, under, exact])
    await test_db.commit()

    test_db.add_all([
        ConfessionLike(confession_id=over.id, user_identifier="anon_1"),
        ConfessionLike(confession_id=over.id, user_fid=10),
        ConfessionLike(confession_id=under.id, user_identifier="anon_1"),
        ConfessionLike(confession_id=under.id, user_identifier="anon_2"),
        ConfessionLike(confession_id=under.id, user_fid=11),
        ConfessionLike(confession_id=exact.id, user_fid=12),
    ])
    await test_db.commit()

    confessions = await ConfessionService(test_db).fetch_confessions()

    counts = {c.id: c.like_count for c in confessions}
    assert counts == {over.id: 2, under.id: 3, exact.id: 1}

    assert await stored_like_count(test_db, over.id) == 2
    assert await stored_like_count(test_db, under.id) == 3
    assert await stored_like_count(test_db, exact.id) == 1

@pytest.mark.asyncio
async def test_get_confession(test_db):
    confession_service = ConfessionService(test_db)
    created = await confession_service.create_confession(ConfessionCreate(text="hi", author="Anon", user_fid=99))

    fetched = await confession_service.get_confession(created.id)

    assert fetched.id == created.id
    assert fetched.user_fid == 99
    assert await confession_service.get_confession(created.id + 100) is None
