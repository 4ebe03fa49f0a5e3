"""Tests for wishlist API endpoints."""

from httpx import AsyncClient

from tests.support import Catalog, as_user

INT32_MAX = 2**31 - 1


async def _set(
    client: AsyncClient, user_id: int, printing_id: int, owned: int, wanted: int, proxy: int
) -> None:
    response = await client.put(
        f"/api/collection/{printing_id}",
        json={"quantityOwned": owned, "quantityWanted": wanted, "quantityProxyOwned": proxy},
        headers=as_user(user_id),
    )
    assert response.status_code == 200


class TestGetWishlist:
    async def test_only_wanted_rows(self, client: AsyncClient, catalog: Catalog) -> None:
        """Rows with nothing wanted are not on the wishlist."""
        await _set(client, catalog.user_id, catalog.pikachu_id, 3, 0, 0)
        await _set(client, catalog.user_id, catalog.bolt_alpha_id, 0, 2, 0)

        response = await client.get("/api/wishlist", headers=as_user(catalog.user_id))

        assert response.status_code == 200
        items = response.json()["items"]
        assert [i["cardPrintingId"] for i in items] == [catalog.bolt_alpha_id]
        assert items[0]["quantityWanted"] == 2


class TestUpsert:
    async def test_upsert_sets_wanted(self, client: AsyncClient, catalog: Catalog) -> None:
        response = await client.post(
            "/api/wishlist",
            json={"cardPrintingId": catalog.pikachu_id, "quantityWanted": 3},
            headers=as_user(catalog.user_id),
        )

        assert response.status_code == 200
        assert response.json()["quantityWanted"] == 3

    async def test_upsert_rejects_negative(self, client: AsyncClient, catalog: Catalog) -> None:
        response = await client.post(
            "/api/wishlist",
            json={"cardPrintingId": catalog.pikachu_id, "quantityWanted": -1},
            headers=as_user(catalog.user_id),
        )

        assert response.status_code == 400

    async def test_bulk_set(self, client: AsyncClient, catalog: Catalog) -> None:
        response = await client.put(
            "/api/wishlist",
            json=[
                {"cardPrintingId": catalog.pikachu_id, "quantityWanted": 1},
                {"cardPrintingId": catalog.bolt_beta_id, "quantityWanted": 4},
            ],
            headers=as_user(catalog.user_id),
        )

        assert response.status_code == 200
        assert [r["quantityWanted"] for r in response.json()] == [1, 4]

    async def test_bulk_set_unknown_printing_rejects_all(
        self, client: AsyncClient, catalog: Catalog
    ) -> None:
        headers = as_user(catalog.user_id)

        response = await client.put(
            "/api/wishlist",
            json=[
                {"cardPrintingId": catalog.pikachu_id, "quantityWanted": 1},
                {"cardPrintingId": 9999, "quantityWanted": 4},
            ],
            headers=headers,
        )

        assert response.status_code == 404
        listing = await client.get("/api/wishlist", headers=headers)
        assert listing.json()["total"] == 0


class TestQuickAdd:
    async def test_quick_add_wanted(self, client: AsyncClient, catalog: Catalog) -> None:
        response = await client.post(
            "/api/wishlist/items",
            json={"printingId": catalog.pikachu_id, "quantity": 2},
            headers=as_user(catalog.user_id),
        )

        assert response.status_code == 200
        assert response.json() == {"printingId": catalog.pikachu_id, "quantityWanted": 2}

    async def test_quick_add_saturates(self, client: AsyncClient, catalog: Catalog) -> None:
        """Wanted never exceeds INT32_MAX."""
        await _set(client, catalog.user_id, catalog.pikachu_id, 0, INT32_MAX, 0)

        response = await client.post(
            "/api/wishlist/items",
            json={"printingId": catalog.pikachu_id, "quantity": 5},
            headers=as_user(catalog.user_id),
        )

        assert response.json()["quantityWanted"] == INT32_MAX


class TestMoveToCollection:
    async def test_move_into_owned(self, client: AsyncClient, catalog: Catalog) -> None:
        await _set(client, catalog.user_id, catalog.pikachu_id, 5, 10, 0)

        response = await client.post(
            "/api/wishlist/move-to-collection",
            json={"cardPrintingId": catalog.pikachu_id, "quantity": 3},
            headers=as_user(catalog.user_id),
        )

        assert response.status_code == 200
        assert response.json() == {
            "printingId": catalog.pikachu_id,
            "wantedAfter": 7,
            "ownedAfter": 8,
            "proxyAfter": 0,
            "availability": 8,
            "availabilityWithProxies": 8,
        }

    async def test_move_more_than_wanted_as_proxy(
        self, client: AsyncClient, catalog: Catalog
    ) -> None:
        """Wanted floors at zero; the full quantity still lands in proxies."""
        await _set(client, catalog.user_id, catalog.pikachu_id, 0, 2, 0)

        response = await client.post(
            "/api/wishlist/move-to-collection",
            json={"cardPrintingId": catalog.pikachu_id, "quantity": 5, "useProxy": True},
            headers=as_user(catalog.user_id),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["wantedAfter"] == 0
        assert data["ownedAfter"] == 0
        assert data["proxyAfter"] == 5
        assert data["availability"] == 0
        assert data["availabilityWithProxies"] == 5

    async def test_move_requires_positive_quantity(
        self, client: AsyncClient, catalog: Catalog
    ) -> None:
        response = await client.post(
            "/api/wishlist/move-to-collection",
            json={"cardPrintingId": catalog.pikachu_id, "quantity": 0},
            headers=as_user(catalog.user_id),
        )

        assert response.status_code == 400

    async def test_move_unknown_printing(self, client: AsyncClient, catalog: Catalog) -> None:
        response = await client.post(
            "/api/wishlist/move-to-collection",
            json={"cardPrintingId": 9999, "quantity": 1},
            headers=as_user(catalog.user_id),
        )

        assert response.status_code == 404


class TestRemove:
    async def test_remove_zeroes_wanted(self, client: AsyncClient, catalog: Catalog) -> None:
        headers = as_user(catalog.user_id)
        await _set(client, catalog.user_id, catalog.pikachu_id, 1, 3, 0)

        response = await client.delete(f"/api/wishlist/{catalog.pikachu_id}", headers=headers)

        assert response.status_code == 204
        wishlist = await client.get("/api/wishlist", headers=headers)
        collection = await client.get("/api/collection", headers=headers)
        assert wishlist.json()["total"] == 0
        assert collection.json()["items"][0]["quantityOwned"] == 1
