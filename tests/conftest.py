from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cardshop.db.database import get_session
from cardshop.main import app
from cardshop.models.db import Base, CardCondition, CardDB, CardInventoryDB
from cardshop.models.order import Caller


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """Provide an async test client with overridden database session."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@dataclass(frozen=True)
class SeededCard:
    """Ids of a committed card and its inventory rows, keyed by condition."""

    card_id: str
    inventory: dict[CardCondition, int] = field(default_factory=dict)


SeedCard = Callable[..., Awaitable[SeededCard]]


@pytest.fixture
def seed_card(session_factory) -> SeedCard:
    """Factory that commits a card with stock given as {condition: (price, quantity)}."""

    async def _seed(
        card_id: str,
        name: str,
        set_name: str = "Base Set",
        card_number: str | None = None,
        rarity: str = "Rare",
        stock: dict[CardCondition, tuple[str, int]] | None = None,
    ) -> SeededCard:
        async with session_factory() as session:
            session.add(
                CardDB(
                    id=card_id,
                    name=name,
                    image_url=f"/card-assets/{card_id}.jpg",
                    rarity=rarity,
                    set=set_name,
                    card_number=card_number,
                )
            )
            rows = {
                condition: CardInventoryDB(
                    card_id=card_id,
                    condition=condition,
                    price=Decimal(price),
                    quantity=quantity,
                )
                for condition, (price, quantity) in (stock or {}).items()
            }
            session.add_all(rows.values())
            await session.commit()
            return SeededCard(card_id, {cond: row.id for cond, row in rows.items()})

    return _seed


@pytest.fixture
async def charizard(seed_card: SeedCard) -> SeededCard:
    """Base Set Charizard: NEAR_MINT 950.00 x5 and PLAYED 180.00 x0."""
    return await seed_card(
        "base-set-4-charizard",
        "Charizard",
        card_number="4/102",
        stock={
            CardCondition.NEAR_MINT: ("950.00", 5),
            CardCondition.PLAYED: ("180.00", 0),
        },
    )


@pytest.fixture
async def catalog(seed_card: SeedCard) -> dict[str, SeededCard]:
    """A small catalog spread across every carried set."""
    cards = [
        await seed_card(
            "base-set-4-charizard",
            "Charizard",
            card_number="4/102",
            stock={
                CardCondition.NEAR_MINT: ("950.00", 5),
                CardCondition.PLAYED: ("180.00", 0),
            },
        ),
        await seed_card(
            "base-set-2-blastoise",
            "Blastoise",
            card_number="2/102",
            stock={CardCondition.NEAR_MINT: ("400.00", 2)},
        ),
        await seed_card(
            "base-set-58-pikachu",
            "Pikachu",
            card_number="58/102",
            rarity="Common",
            stock={
                CardCondition.NEAR_MINT: ("5.00", 10),
                CardCondition.POOR: ("1.00", 0),
            },
        ),
        await seed_card(
            "jungle-10-scyther",
            "Scyther",
            set_name="Jungle",
            card_number="10/64",
            stock={CardCondition.EXCELLENT: ("30.00", 3)},
        ),
        await seed_card(
            "fossil-50-kabuto",
            "Kabuto",
            set_name="Fossil",
            card_number="50/62",
            rarity="Common",
        ),
        await seed_card(
            "base-set-2-4-charizard",
            "Charizard",
            set_name="Base Set 2",
            card_number="4/130",
            stock={CardCondition.LIGHT_PLAYED: ("60.00", 0)},
        ),
        await seed_card(
            "team-rocket-4-dark-charizard",
            "Dark Charizard",
            set_name="Team Rocket",
            card_number="4/82",
            stock={CardCondition.MINT: ("300.00", 1)},
        ),
    ]
    return {card.card_id: card for card in cards}


@pytest.fixture
def caller() -> Caller:
    return Caller(user_id="user-ash", email="ash@example.com", name="Ash")


@pytest.fixture
def customer_headers() -> dict[str, str]:
    return {"X-User-Id": "user-ash", "X-User-Email": "ash@example.com", "X-User-Name": "Ash"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-User-Id": "user-oak", "X-User-Name": "Professor Oak", "X-User-Role": "ADMIN"}
