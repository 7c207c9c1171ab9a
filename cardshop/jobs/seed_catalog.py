"""
Seed the catalog from a directory of card images.

Expects one folder per set, named like "Base Set (BS)", holding images
named "<number>-<name>.jpg". Each image becomes a card with one inventory
row per condition. Cards and rows that already exist are left untouched,
so the job can be re-run safely.
"""

import argparse
import asyncio
import logging
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession

from cardshop.db.database import async_session_factory, init_db
from cardshop.db.operations import create_card, get_inventory_row, upsert_inventory
from cardshop.models.db import CardCondition, CardDB

logger = logging.getLogger(__name__)

SET_FOLDERS = {
    "Base Set (BS)": "Base Set",
    "Jungle (JU)": "Jungle",
    "Fossil (FO)": "Fossil",
    "Base Set 2 (B2)": "Base Set 2",
    "Team Rocket (RO)": "Team Rocket",
}

IMAGE_URL_PREFIX = "/card-assets"

_FILENAME_PATTERN = re.compile(r"^(\d+)-(.+)\.jpg$")

_TRAINER_KEYWORDS = (
    "trainer",
    "professor",
    "breeder",
    "finder",
    "search",
    "maintenance",
    "pluspower",
    "potion",
    "switch",
    "center",
    "flute",
    "pokédex",
    "ball",
    "recall",
    "removal",
    "retrieval",
    "revive",
    "scoop",
    "devolution",
    "imposter",
    "lass",
    "computer",
    "defender",
    "double",
    "full",
    "gust",
    "heal",
    "item",
    "bill",
    "oak",
    "super",
    "doll",
    "gambler",
    "challenge",
    "digger",
    "goop",
    "nightly",
    "sleep",
    "the boss",
    "rockets",
)

_LEGENDARY_NAMES = frozenset(
    {"mewtwo", "mew", "articuno", "zapdos", "moltres", "dratini", "dragonite"}
)

BASE_PRICES = {
    "Common": Decimal("0.50"),
    "Uncommon": Decimal("1.50"),
    "Rare": Decimal("5.00"),
}
DEFAULT_BASE_PRICE = Decimal("1.00")

PRICE_MULTIPLIERS = {
    CardCondition.POOR: Decimal("0.3"),
    CardCondition.PLAYED: Decimal("0.5"),
    CardCondition.LIGHT_PLAYED: Decimal("0.7"),
    CardCondition.GOOD: Decimal("0.8"),
    CardCondition.EXCELLENT: Decimal("0.9"),
    CardCondition.NEAR_MINT: Decimal("1.0"),
    CardCondition.MINT: Decimal("1.2"),
}

BASE_STOCK = {"Common": 50, "Uncommon": 25, "Rare": 10}
DEFAULT_BASE_STOCK = 20

STOCK_MULTIPLIERS = {
    CardCondition.POOR: Decimal("1.5"),
    CardCondition.PLAYED: Decimal("1.3"),
    CardCondition.LIGHT_PLAYED: Decimal("1.2"),
    CardCondition.GOOD: Decimal("1.1"),
    CardCondition.EXCELLENT: Decimal("1.0"),
    CardCondition.NEAR_MINT: Decimal("0.8"),
    CardCondition.MINT: Decimal("0.5"),
}


@dataclass(frozen=True)
class SeedCard:
    """A card parsed from an image file, ready to insert."""

    id: str
    name: str
    image_url: str
    rarity: str
    set: str
    card_number: str
    description: str


def determine_rarity(card_number: int, name: str) -> str:
    """
    Guess a card's rarity from its number and file-name slug.

    High numbers and energy are Common, trainers Uncommon, legendaries
    and low numbers Rare.
    """
    if card_number > 50:
        return "Common"
    if "energy" in name:
        return "Common"
    if any(keyword in name for keyword in _TRAINER_KEYWORDS):
        return "Uncommon"
    if name in _LEGENDARY_NAMES:
        return "Rare"
    if card_number <= 10:
        return "Rare"
    return "Uncommon"


def calculate_price(rarity: str, condition: CardCondition) -> Decimal:
    base = BASE_PRICES.get(rarity, DEFAULT_BASE_PRICE)
    price = base * PRICE_MULTIPLIERS[condition]
    return price.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def calculate_stock(rarity: str, condition: CardCondition) -> int:
    """Rarer cards get less stock; worse conditions get more."""
    base = BASE_STOCK.get(rarity, DEFAULT_BASE_STOCK)
    return int(base * STOCK_MULTIPLIERS[condition])


def parse_card_filename(filename: str) -> tuple[int, str] | None:
    """
    Split "43-abra.jpg" into (43, "abra").

    Returns None for names that don't follow the pattern.
    """
    match = _FILENAME_PATTERN.match(filename)
    if match is None:
        return None
    return int(match.group(1)), match.group(2)


def build_set(folder: Path, set_name: str) -> list[SeedCard]:
    """Parse every card image in one set folder."""
    files = sorted(p.name for p in folder.iterdir() if p.name.endswith(".jpg"))
    set_slug = re.sub(r"\s+", "-", set_name.lower())

    cards: dict[str, SeedCard] = {}
    for filename in files:
        parsed = parse_card_filename(filename)
        if parsed is None:
            logger.warning("Skipping invalid filename: %s", filename)
            continue

        number, slug = parsed
        card_id = f"{set_slug}-{number}-{slug}"
        if card_id in cards:
            continue

        name = slug.replace("-", " ")
        rarity = determine_rarity(number, slug)
        cards[card_id] = SeedCard(
            id=card_id,
            name=name[:1].upper() + name[1:],
            image_url=f"{IMAGE_URL_PREFIX}/{folder.name}/{filename}",
            rarity=rarity,
            set=set_name,
            card_number=f"{number}/{len(files)}",
            description=f"{rarity} {name} from {set_name}",
        )

    return list(cards.values())


def build_catalog(root: Path) -> list[SeedCard]:
    """Parse all known set folders under `root`. Missing folders are skipped."""
    catalog: list[SeedCard] = []
    for folder_name, set_name in SET_FOLDERS.items():
        folder = root / folder_name
        if not folder.is_dir():
            logger.warning("Folder not found: %s", folder)
            continue

        logger.info("Processing %s...", set_name)
        catalog.extend(build_set(folder, set_name))

    return catalog


async def seed_catalog(session: AsyncSession, root: Path) -> dict[str, int]:
    """
    Insert the cards and inventory rows found under `root`.

    Does not commit; the caller owns the transaction.

    Returns:
        Counts of cards and inventory rows created
    """
    counts = {"cards": 0, "inventory": 0}

    for seed in build_catalog(root):
        if await session.get(CardDB, seed.id) is None:
            await create_card(
                session,
                id=seed.id,
                name=seed.name,
                image_url=seed.image_url,
                rarity=seed.rarity,
                set=seed.set,
                card_number=seed.card_number,
                description=seed.description,
            )
            counts["cards"] += 1

        for condition in CardCondition:
            if await get_inventory_row(session, seed.id, condition) is not None:
                continue
            await upsert_inventory(
                session,
                seed.id,
                condition,
                price=calculate_price(seed.rarity, condition),
                quantity=calculate_stock(seed.rarity, condition),
            )
            counts["inventory"] += 1

    return counts


async def run_seed(root: Path) -> dict[str, int]:
    """Create tables if needed and seed the catalog in one transaction."""
    await init_db()

    async with async_session_factory() as session:
        counts = await seed_catalog(session, root)
        await session.commit()

    logger.info(
        "Seed complete. Created %d cards and %d inventory rows",
        counts["cards"],
        counts["inventory"],
    )
    return counts


def main() -> None:
    """CLI entry point for seeding the catalog."""
    parser = argparse.ArgumentParser(description="Seed the card catalog from images.")
    parser.add_argument("path", type=Path, help="Directory holding one folder per set")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_seed(args.path))


if __name__ == "__main__":
    main()
