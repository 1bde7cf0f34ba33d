# app/cli/seed_reference_data.py
"""
Seeds the curated tables the listing pipeline reads: category requirements
(leaf flags and required aspects), category mappings and starter keyword
rules. Safe to re-run; existing rows are updated in place.
"""
import asyncio
import logging
import click

from sqlalchemy import select

from app.core.logging_config import configure_logging
from app.database import async_session
from app.models.aspect_keyword import AspectKeywordRule
from app.models.category_mapping import CategoryMapping
from app.models.category_requirement import CategoryRequirement

logger = logging.getLogger(__name__)

# (category_id, name, parent_id, is_leaf, required_aspects)
CATEGORY_REQUIREMENTS = [
    ("19006", "Building Toys", "220", True, ["Brand", "MPN"]),
    ("171485", "Tablets", "58058", True, ["Brand", "MPN"]),
    ("139971", "Consoles", "1249", True, ["Brand", "Platform"]),
    ("20625", "Small Kitchen Appliances", "20667", True, ["Brand", "Type"]),
    ("293", "Consumer Electronics", None, False, []),
    ("112529", "Headphones", "293", True, ["Brand", "Connectivity", "Type"]),
    ("1249", "Video Games & Consoles", None, False, []),
    ("139973", "Video Games", "1249", True, ["Platform", "Game Name"]),
    ("177799", "Pet Supplies", None, False, []),
    ("20743", "Dog Supplies", "177799", True, ["Brand", "Type"]),
    ("631", "Hand Tools", "3244", True, ["Brand", "Type"]),
    ("617", "DVDs & Movies", None, False, []),
    ("63861", "DVDs & Blu-ray", "617", True, ["Format", "Movie/TV Title"]),
    ("99", "Everything Else", None, True, []),
]

# (productGroup, type, ebay_category_id, ebay_category_name, priority, is_default)
CATEGORY_MAPPINGS = [
    ("Toy", "BUILDING_TOYS", "19006", "Building Toys", 10, False),
    ("Electronics", "TABLET_COMPUTER", "171485", "Tablets", 10, False),
    ("Electronics", "HEADPHONES", "112529", "Headphones", 10, False),
    ("Video Games", "VIDEO_GAME_CONSOLE", "139971", "Consoles", 10, False),
    ("Video Games", None, "139973", "Video Games", 0, False),
    ("Kitchen", None, "20625", "Small Kitchen Appliances", 0, False),
    ("Pet Products", None, "177799", "Pet Supplies", 0, False),
    ("Tools & Home Improvement", None, "631", "Hand Tools", 0, False),
    ("Movie", None, "617", "DVDs & Movies", 0, False),
    (None, None, "99", "Everything Else", 0, True),
]

# (aspect_name, keyword_pattern, aspect_value); global rules
KEYWORD_RULES = [
    ("Connectivity", r"wireless|bluetooth|bt\b", "Wireless"),
    ("Connectivity", r"wired|3\.5mm|aux|cable", "Wired"),
    ("Connectivity", r"usb-c|usb c", "USB-C"),
    ("Type", r"over-ear|over ear|around ear", "Ear-Cup (Over the Ear)"),
    ("Type", r"on-ear|on ear", "Ear-Pad (On the Ear)"),
    ("Type", r"earbud|in-ear|in ear|earphone", "Earbud (In Ear)"),
    ("Type", r"true wireless|tws", "Earbud (In Ear)"),
    ("Platform", r"ps5|playstation 5", "Sony PlayStation 5"),
    ("Platform", r"ps4|playstation 4", "Sony PlayStation 4"),
    ("Platform", r"xbox series|series x|series s", "Microsoft Xbox Series X|S"),
    ("Platform", r"xbox one", "Microsoft Xbox One"),
    ("Platform", r"nintendo switch|switch", "Nintendo Switch"),
    ("Platform", r"\bpc\b|windows|steam", "PC"),
    ("Color", r"\bblack\b", "Black"),
    ("Color", r"\bwhite\b", "White"),
    ("Color", r"\bsilver\b", "Silver"),
    ("Color", r"\bgold\b", "Gold"),
    ("Color", r"\bred\b", "Red"),
    ("Color", r"\bblue\b|navy", "Blue"),
    ("Color", r"\bpink\b|rose", "Pink"),
    ("Color", r"\bgreen\b", "Green"),
    ("Type", r"portable|travel", "Portable"),
    ("Type", r"desktop|tabletop", "Desktop"),
]

# Category-scoped rules; tried before the global ones above
SCOPED_KEYWORD_RULES = [
    ("Format", r"blu-?ray", "Blu-ray", "63861"),
    ("Format", r"4k|uhd", "4K UHD Blu-ray", "63861"),
    ("Format", r"\bdvd\b", "DVD", "63861"),
]


@click.command()
def seed_reference_data():
    """Seed category requirements, category mappings and keyword rules"""
    configure_logging()
    counts = asyncio.run(run_seed())
    click.echo("\nSeed completed!")
    for table, count in counts.items():
        click.echo(f"{table}: {count}")


async def run_seed(session_factory=async_session) -> dict:
    async with session_factory() as session:
        requirements = await seed_category_requirements(session)
        mappings = await seed_category_mappings(session)
        rules = await seed_keyword_rules(session)
        await session.commit()
    return {
        "category requirements": requirements,
        "category mappings": mappings,
        "keyword rules": rules,
    }


async def seed_category_requirements(session) -> int:
    for category_id, name, parent_id, is_leaf, required in CATEGORY_REQUIREMENTS:
        result = await session.execute(
            select(CategoryRequirement).where(CategoryRequirement.category_id == category_id)
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = CategoryRequirement(category_id=category_id)
            session.add(row)
        row.category_name = name
        row.parent_category_id = parent_id
        row.is_leaf = is_leaf
        row.required_aspects = required
    logger.info(f"Seeded {len(CATEGORY_REQUIREMENTS)} category requirements")
    return len(CATEGORY_REQUIREMENTS)


async def seed_category_mappings(session) -> int:
    for group, subtype, category_id, name, priority, is_default in CATEGORY_MAPPINGS:
        query = select(CategoryMapping).where(
            CategoryMapping.source_category.is_(None) if group is None
            else CategoryMapping.source_category == group,
            CategoryMapping.source_subtype.is_(None) if subtype is None
            else CategoryMapping.source_subtype == subtype,
        )
        result = await session.execute(query)
        row = result.scalars().first()
        if row is None:
            row = CategoryMapping(source_category=group, source_subtype=subtype)
            session.add(row)
        row.ebay_category_id = category_id
        row.ebay_category_name = name
        row.priority = priority
        row.is_default = is_default
    logger.info(f"Seeded {len(CATEGORY_MAPPINGS)} category mappings")
    return len(CATEGORY_MAPPINGS)


async def seed_keyword_rules(session) -> int:
    rules = [(a, p, v, None) for a, p, v in KEYWORD_RULES] + SCOPED_KEYWORD_RULES
    added = 0
    for aspect_name, pattern, value, category_id in rules:
        query = select(AspectKeywordRule).where(
            AspectKeywordRule.aspect_name == aspect_name,
            AspectKeywordRule.keyword_pattern == pattern,
            AspectKeywordRule.category_id.is_(None) if category_id is None
            else AspectKeywordRule.category_id == category_id,
        )
        result = await session.execute(query)
        row = result.scalar_one_or_none()
        if row is None:
            session.add(AspectKeywordRule(
                aspect_name=aspect_name,
                keyword_pattern=pattern,
                aspect_value=value,
                category_id=category_id,
            ))
            added += 1
        else:
            row.aspect_value = value
    logger.info(f"Seeded {len(rules)} keyword rules ({added} new)")
    return len(rules)


if __name__ == "__main__":
    seed_reference_data()
