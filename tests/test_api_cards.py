"""Tests for catalog API endpoints."""

from httpx import AsyncClient

from cardshop.models.db import CardCondition


class TestListCards:
    async def test_empty_catalog(self, client: AsyncClient) -> None:
        response = await client.get("/cards")

        assert response.status_code == 200
        data = response.json()
        assert data["cards"] == []
        assert data["count"] == 0
        assert data["limit"] == 20
        assert data["offset"] == 0

    async def test_default_order(self, client: AsyncClient, catalog) -> None:
        response = await client.get("/cards")

        ids = [card["id"] for card in response.json()["cards"]]
        assert ids[:3] == ["base-set-2-blastoise", "base-set-4-charizard", "base-set-58-pikachu"]
        assert ids[-1] == "team-rocket-4-dark-charizard"

    async def test_cards_carry_inventory(self, client: AsyncClient, catalog) -> None:
        response = await client.get("/cards", params={"name": "blastoise"})

        card = response.json()["cards"][0]
        assert card["set"] == "Base Set"
        assert card["inventory_items"] == [
            {
                "id": catalog["base-set-2-blastoise"].inventory[CardCondition.NEAR_MINT],
                "card_id": "base-set-2-blastoise",
                "condition": "NEAR_MINT",
                "price": 400.0,
                "quantity": 2,
            }
        ]

    async def test_filter_condition_in_stock(self, client: AsyncClient, catalog) -> None:
        response = await client.get("/cards", params={"condition": "PLAYED", "in_stock": "true"})

        assert response.status_code == 200
        assert response.json()["cards"] == []

    async def test_filter_and_sort(self, client: AsyncClient, catalog) -> None:
        response = await client.get(
            "/cards",
            params={"name": "charizard", "sort_field": "PRICE", "sort_order": "DESC"},
        )

        ids = [card["id"] for card in response.json()["cards"]]
        assert ids == [
            "team-rocket-4-dark-charizard",
            "base-set-4-charizard",
            "base-set-2-4-charizard",
        ]

    async def test_price_range(self, client: AsyncClient, catalog) -> None:
        response = await client.get("/cards", params={"min_price": "0", "max_price": "10"})

        ids = [card["id"] for card in response.json()["cards"]]
        assert ids == ["base-set-58-pikachu"]

    async def test_pagination(self, client: AsyncClient, catalog) -> None:
        response = await client.get("/cards", params={"limit": 2, "offset": 2})

        data = response.json()
        assert [card["id"] for card in data["cards"]] == [
            "base-set-58-pikachu",
            "jungle-10-scyther",
        ]
        assert data["count"] == 2
        assert data["limit"] == 2
        assert data["offset"] == 2

    async def test_limit_above_max_rejected(self, client: AsyncClient) -> None:
        response = await client.get("/cards", params={"limit": 101})

        assert response.status_code == 422
        data = response.json()
        assert data["outcome"] == "known_failure"
        assert data["failure"]["kind"] == "validation_failed"
        assert "limit" in data["failure"]["detail"]

    async def test_unknown_sort_field_rejected(self, client: AsyncClient) -> None:
        response = await client.get("/cards", params={"sort_field": "POPULARITY"})

        assert response.status_code == 422
        assert response.json()["failure"]["kind"] == "validation_failed"


class TestGetCard:
    async def test_get_card(self, client: AsyncClient, charizard) -> None:
        response = await client.get(f"/cards/{charizard.card_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Charizard"
        assert data["card_number"] == "4/102"
        assert {row["condition"] for row in data["inventory_items"]} == {"NEAR_MINT", "PLAYED"}

    async def test_get_missing_card(self, client: AsyncClient) -> None:
        response = await client.get("/cards/nonexistent")

        assert response.status_code == 404
        data = response.json()
        assert data["outcome"] == "known_failure"
        assert data["failure"]["kind"] == "not_found"
        assert data["failure"]["message"] == "Card nonexistent not found"


class TestCardInventory:
    async def test_inventory_cheapest_first(self, client: AsyncClient, charizard) -> None:
        response = await client.get(f"/cards/{charizard.card_id}/inventory")

        assert response.status_code == 200
        data = response.json()
        assert data["card_id"] == charizard.card_id
        assert [(row["condition"], row["price"], row["quantity"]) for row in data["inventory"]] == [
            ("PLAYED", 180.0, 0),
            ("NEAR_MINT", 950.0, 5),
        ]

    async def test_inventory_for_unknown_card_is_empty(self, client: AsyncClient) -> None:
        response = await client.get("/cards/nonexistent/inventory")

        assert response.status_code == 200
        assert response.json()["inventory"] == []
