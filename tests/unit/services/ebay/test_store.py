# tests/unit/services/ebay/test_store.py
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.cli.seed_reference_data import run_seed, CATEGORY_REQUIREMENTS
from app.core.exceptions import DatabaseError
from app.models.aspect_keyword import AspectKeywordRule
from app.models.aspect_miss import AspectMiss
from app.models.ebay import EbayListing
from app.services.ebay.store import ListingStore
from tests.mocks import MockData

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store(db_session):
    return ListingStore(db_session)


"""
1. Category mappings and requirements
"""

@pytest.mark.asyncio
async def test_mapping_lookups(db_session, store):
    db_session.add_all([
        MockData.mapping("Electronics", "HEADPHONES", "293", "Consumer Electronics", priority=1),
        MockData.mapping("Electronics", "HEADPHONES", "112529", "Headphones", priority=10),
        MockData.mapping("Electronics", None, "293", "Consumer Electronics"),
        MockData.mapping(None, None, "99", "Everything Else", is_default=True),
    ])
    await db_session.commit()

    exact = await store.get_category_mapping("Electronics", "HEADPHONES")
    group = await store.get_group_mapping("Electronics")
    default = await store.get_default_mapping()

    assert exact.ebay_category_id == "112529"
    assert group.ebay_category_id == "293"
    assert group.source_subtype is None
    assert default.ebay_category_id == "99"
    assert await store.get_category_mapping("Electronics", "TABLET_COMPUTER") is None

@pytest.mark.asyncio
async def test_requirement_and_leaf_children(db_session, store):
    db_session.add_all([
        MockData.requirement("617", "DVDs & Movies", None, False),
        MockData.requirement("63861", "DVDs & Blu-ray", "617", True, ["Format"]),
        MockData.requirement("617001", "Laserdiscs", "617", True),
        MockData.requirement("617002", "Other Formats", "617", False),
    ])
    await db_session.commit()

    requirement = await store.get_category_requirement("63861")
    children = await store.get_leaf_children("617")

    assert requirement.required_aspects == ["Format"]
    assert [child.category_id for child in children] == ["617001", "63861"]
    assert await store.get_category_requirement("1") is None


"""
2. Aspect cache rows
"""

@pytest.mark.asyncio
async def test_upsert_cached_aspects(store):
    await store.upsert_cached_aspects("112529", ["Brand"], NOW, NOW + timedelta(days=7), "Headphones")
    later = NOW + timedelta(days=8)
    await store.upsert_cached_aspects("112529", ["Brand", "Type"], later, later + timedelta(days=7))

    entry = await store.get_cached_aspects("112529")

    assert entry.required_aspects == ["Brand", "Type"]
    assert entry.category_name == "Headphones"
    assert await store.get_cached_aspects("99") is None


"""
3. Keyword rules and misses
"""

@pytest.mark.asyncio
async def test_keyword_rules_include_scoped_and_global(db_session, store):
    db_session.add_all([
        AspectKeywordRule(aspect_name="Color", keyword_pattern=r"\bblack\b", aspect_value="Black"),
        AspectKeywordRule(aspect_name="Format", keyword_pattern="dvd", aspect_value="DVD", category_id="63861"),
        AspectKeywordRule(aspect_name="Type", keyword_pattern="earbud", aspect_value="Earbud", category_id="112529"),
    ])
    await db_session.commit()

    rules = await store.get_keyword_rules("63861")

    assert [rule.aspect_name for rule in rules] == ["Color", "Format"]

@pytest.mark.asyncio
async def test_aspect_miss_is_recorded_once(db_session, store):
    assert await store.aspect_miss_exists("B000TEST01", "Type") is False

    assert await store.add_aspect_miss("B000TEST01", "Type", "Acme Widget", "112529", "Headphones", "Acme") is True
    assert await store.add_aspect_miss("B000TEST01", "Type", "Acme Widget", "112529", "Headphones", "Acme") is False

    assert await store.aspect_miss_exists("B000TEST01", "Type") is True
    count = await db_session.scalar(select(func.count()).select_from(AspectMiss))
    assert count == 1
    miss = (await db_session.execute(select(AspectMiss))).scalar_one()
    assert miss.status == "pending"

@pytest.mark.asyncio
async def test_pending_misses_oldest_first_with_limit(store):
    await store.add_aspect_miss("B000TEST01", "Type", "Acme Earbuds", "112529")
    await store.add_aspect_miss("B000TEST02", "Type", "Acme Over-Ear", "112529")
    await store.add_aspect_miss("B000TEST03", "Format", "Some Movie DVD", "63861")

    pending = await store.get_pending_aspect_misses(limit=2)

    assert [miss.asin for miss in pending] == ["B000TEST01", "B000TEST02"]

@pytest.mark.asyncio
async def test_resolved_miss_leaves_pending_queue(db_session, store):
    await store.add_aspect_miss("B000TEST01", "Type", "Acme Earbuds", "112529")
    miss = (await store.get_pending_aspect_misses())[0]

    assert await store.resolve_aspect_miss(miss.id, "Earbud (In Ear)", NOW) is True
    assert await store.resolve_aspect_miss(9999, "Earbud (In Ear)", NOW) is False

    assert await store.get_pending_aspect_misses() == []
    stored = (await db_session.execute(select(AspectMiss))).scalar_one()
    assert stored.status == "resolved"
    assert stored.resolved_value == "Earbud (In Ear)"
    assert stored.reviewed_at is not None

@pytest.mark.asyncio
async def test_read_failure_rolls_back_and_raises_database_error(db_session, store, mocker):
    mocker.patch.object(
        db_session, "execute",
        AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("connection reset"))),
    )
    rollback = mocker.spy(db_session, "rollback")

    with pytest.raises(DatabaseError, match="keyword rules"):
        await store.get_keyword_rules("112529")

    rollback.assert_called_once()


"""
4. Listing records
"""

@pytest.mark.asyncio
async def test_save_listing_record_upserts_by_sku(db_session, store):
    common = dict(
        sku="wi_B000TEST01",
        asin="B000TEST01",
        title="Acme Widget",
        category_id="112529",
        category_name="Headphones",
        price=Decimal("19.99"),
        quantity=1,
        condition="NEW",
    )
    await store.save_listing_record(offer_id="7001", listing_status="draft", **common)
    await store.save_listing_record(
        offer_id="7002",
        listing_status="active",
        ebay_item_id="110551234567",
        listing_url="https://www.ebay.com/itm/110551234567",
        **common,
    )

    rows = (await db_session.execute(select(EbayListing))).scalars().all()

    assert len(rows) == 1
    assert rows[0].offer_id == "7002"
    assert rows[0].listing_status == "active"
    assert rows[0].ebay_item_id == "110551234567"


"""
5. Reference data seeding
"""

@pytest.mark.asyncio
async def test_seed_is_idempotent(test_engine):
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    first = await run_seed(session_factory)
    second = await run_seed(session_factory)

    assert first == second
    assert first["category requirements"] == len(CATEGORY_REQUIREMENTS)

    async with session_factory() as session:
        store = ListingStore(session)
        rule_count = await session.scalar(select(func.count()).select_from(AspectKeywordRule))
        assert rule_count == first["keyword rules"]
        assert (await store.get_default_mapping()).ebay_category_id == "99"
        assert [c.category_id for c in await store.get_leaf_children("177799")] == ["20743"]
