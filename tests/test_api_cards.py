"""Tests for card catalog endpoints."""

from httpx import AsyncClient

from tests.support import Catalog, as_user


class TestSearchPrintings:
    async def test_search_by_name(self, client: AsyncClient, catalog: Catalog) -> None:
        response = await client.get("/api/cards/printings", params={"name": "pika"})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["cardName"] == "Pikachu"
        assert data["items"][0]["set"] == "Mega Evolution"

    async def test_page_size_capped(self, client: AsyncClient, catalog: Catalog) -> None:
        response = await client.get("/api/cards/printings", params={"pageSize": 100000})

        assert response.json()["pageSize"] == 200

    async def test_invalid_page(self, client: AsyncClient, catalog: Catalog) -> None:
        response = await client.get("/api/cards/printings", params={"page": 0})

        assert response.status_code == 400


class TestCardDetail:
    async def test_card_with_printings(self, client: AsyncClient, catalog: Catalog) -> None:
        search = await client.get("/api/cards/printings", params={"name": "bolt"})
        card_id = search.json()["items"][0]["cardId"]

        response = await client.get(f"/api/card/{card_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Lightning Bolt"
        assert [p["style"] for p in data["printings"]] == ["Standard", "Proxy"]

    async def test_unknown_card(self, client: AsyncClient, catalog: Catalog) -> None:
        response = await client.get("/api/card/999")

        assert response.status_code == 404


class TestCatalogAdmin:
    async def test_create_card_and_printing(self, client: AsyncClient, catalog: Catalog) -> None:
        headers = as_user(catalog.admin_id)
        card = await client.post(
            "/api/card",
            json={"game": "Pokemon TCG", "name": "Eevee", "cardType": "Pokemon"},
            headers=headers,
        )
        card_id = card.json()["id"]

        created = await client.post(
            "/api/card/printing",
            json={"cardId": card_id, "set": "Base", "number": "1", "rarity": "Common"},
            headers=headers,
        )
        updated = await client.post(
            "/api/card/printing",
            json={
                "id": created.json()["id"],
                "cardId": card_id,
                "set": "Base",
                "number": "1",
                "rarity": "Rare",
            },
            headers=headers,
        )

        assert card.status_code == 201
        assert created.status_code == 201
        assert created.json()["style"] == "Standard"
        assert updated.status_code == 200
        assert updated.json()["rarity"] == "Rare"

    async def test_create_card_requires_admin(self, client: AsyncClient, catalog: Catalog) -> None:
        response = await client.post(
            "/api/card",
            json={"game": "Pokemon TCG", "name": "Eevee", "cardType": "Pokemon"},
            headers=as_user(catalog.user_id),
        )

        assert response.status_code == 403

    async def test_printing_for_unknown_card(self, client: AsyncClient, catalog: Catalog) -> None:
        response = await client.post(
            "/api/card/printing",
            json={"cardId": 999, "set": "Base", "number": "1", "rarity": "Common"},
            headers=as_user(catalog.admin_id),
        )

        assert response.status_code == 404


class TestFacets:
    async def test_games(self, client: AsyncClient, catalog: Catalog) -> None:
        response = await client.get("/api/cards/facets/games")

        assert response.status_code == 200
        assert response.json() == ["Magic: The Gathering", "Pokemon TCG"]

    async def test_sets_for_one_game(self, client: AsyncClient, catalog: Catalog) -> None:
        response = await client.get(
            "/api/cards/facets/sets", params={"game": "Magic: The Gathering"}
        )

        assert response.json() == {
            "game": "Magic: The Gathering",
            "sets": ["Limited Edition Alpha", "Limited Edition Beta"],
        }

    async def test_sets_for_several_games_omit_game(
        self, client: AsyncClient, catalog: Catalog
    ) -> None:
        response = await client.get(
            "/api/cards/facets/sets", params={"game": "Pokemon TCG, Magic: The Gathering,"}
        )

        assert response.json() == {
            "sets": ["Limited Edition Alpha", "Limited Edition Beta", "Mega Evolution"]
        }

    async def test_rarities_without_filter(self, client: AsyncClient, catalog: Catalog) -> None:
        response = await client.get("/api/cards/facets/rarities")

        assert response.json() == {"rarities": ["Common"]}

    async def test_unknown_game_has_no_rarities(
        self, client: AsyncClient, catalog: Catalog
    ) -> None:
        response = await client.get("/api/cards/facets/rarities", params={"game": "Lorcana"})

        assert response.json() == {"game": "Lorcana", "rarities": []}
