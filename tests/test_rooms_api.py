import math

import pytest
from helpers import make_room
from sqlalchemy import text

from app.viewmodels.search_vm import total_pages_for


@pytest.fixture()
async def twelve_rooms(seed):
    await seed(
        [
            make_room(i, f"Quarto {i:02d}", price=100 + (i * 37) % 500, capacity=1 + i % 4, features=["Wi-Fi"])
            for i in range(1, 13)
        ]
    )


async def test_default_pagination_scenario(client, twelve_rooms):
    first = (await client.get("/rooms")).json()
    assert len(first["rooms"]) == 10
    assert first["pagination"] == {"currentPage": 1, "totalPages": 2, "totalRooms": 12, "limit": 10}

    second = (await client.get("/rooms", params={"page": 2})).json()
    assert [room["id"] for room in second["rooms"]] == [11, 12]
    assert second["pagination"]["currentPage"] == 2


async def test_room_json_shape(client, seed):
    await seed([make_room(7, "Loft", price=610.0, capacity=2, features=["Wi-Fi", "Lareira"])])
    body = (await client.get("/rooms")).json()
    assert body["rooms"] == [
        {
            "id": 7,
            "name": "Loft",
            "description": "Descrição do quarto 7",
            "price": 610.0,
            "capacity": 2,
            "imageUrl": "/images/rooms/7.jpg",
            "features": ["Wi-Fi", "Lareira"],
        }
    ]


async def test_page_beyond_results_is_empty(client, twelve_rooms):
    body = (await client.get("/rooms", params={"page": 5})).json()
    assert body["rooms"] == []
    assert body["pagination"]["totalRooms"] == 12


async def test_empty_catalog_reports_one_page(client):
    body = (await client.get("/rooms")).json()
    assert body == {"rooms": [], "pagination": {"currentPage": 1, "totalPages": 1, "totalRooms": 0, "limit": 10}}


@pytest.mark.parametrize("total, limit", [(0, 10), (1, 10), (10, 10), (11, 10), (25, 5), (26, 5), (3, 1)])
def test_total_pages_formula(total, limit):
    expected = 1 if total <= limit else math.ceil(total / limit)
    assert total_pages_for(total, limit) == expected


@pytest.mark.parametrize("limit", [1, 3, 5, 12])
async def test_pages_concatenate_to_full_list(client, twelve_rooms, limit):
    full = (await client.get("/rooms", params={"limit": 100, "orderBy": "price"})).json()["rooms"]
    total_pages = (await client.get("/rooms", params={"limit": limit, "orderBy": "price"})).json()["pagination"][
        "totalPages"
    ]

    collected = []
    for page in range(1, total_pages + 1):
        resp = await client.get("/rooms", params={"limit": limit, "page": page, "orderBy": "price"})
        collected.extend(resp.json()["rooms"])

    assert [room["id"] for room in collected] == [room["id"] for room in full]


@pytest.mark.parametrize("order_by", ["name", "price", "capacity"])
@pytest.mark.parametrize("direction", ["asc", "desc"])
async def test_sorted_pages(client, twelve_rooms, order_by, direction):
    for page in (1, 2):
        rooms = (
            await client.get("/rooms", params={"orderBy": order_by, "orderDirection": direction, "page": page})
        ).json()["rooms"]
        values = [room[order_by] for room in rooms]
        for current, following in zip(values, values[1:]):
            if direction == "asc":
                assert current <= following
            else:
                assert current >= following


async def test_identical_requests_return_identical_bytes(client, twelve_rooms):
    first = await client.get("/rooms", params={"capacity": "2", "wifi": "true"})
    second = await client.get("/rooms", params={"capacity": "2", "wifi": "true"})
    assert first.status_code == 200
    assert first.content == second.content


async def test_cached_response_served_within_ttl(client, twelve_rooms, session_factory, cache):
    before = await client.get("/rooms")

    async with session_factory() as session:
        await session.execute(text("DELETE FROM rooms WHERE id = 1"))
        await session.commit()

    after = await client.get("/rooms")
    assert after.content == before.content

    cache.clear()
    refreshed = (await client.get("/rooms")).json()
    assert refreshed["pagination"]["totalRooms"] == 11


async def test_parameter_order_does_not_split_cache(client, twelve_rooms, cache):
    await client.get("/rooms?wifi=true&capacity=2")
    await client.get("/rooms?capacity=2&wifi=true")
    assert len(cache) == 1


async def test_unknown_parameters_are_ignored(client, twelve_rooms):
    plain = await client.get("/rooms")
    noisy = await client.get("/rooms", params={"color": "blue", "jacuzzi": "true"})
    assert noisy.json() == plain.json()


async def test_storage_failure_is_generic_500(client, session_factory):
    async with session_factory() as session:
        await session.execute(text("DROP TABLE room_features"))
        await session.execute(text("DROP TABLE favorites"))
        await session.execute(text("DROP TABLE rooms"))
        await session.commit()

    resp = await client.get("/rooms")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Erro ao buscar quartos"}


async def test_favorite_only_requires_token(client, twelve_rooms):
    resp = await client.get("/rooms", params={"favoriteOnly": "true"})
    assert resp.status_code == 401

    resp = await client.get(
        "/rooms", params={"favoriteOnly": "true"}, headers={"Authorization": "Bearer not-a-token"}
    )
    assert resp.status_code == 403


async def test_room_detail(client, twelve_rooms):
    resp = await client.get("/rooms/3")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Quarto 03"
    assert resp.json()["features"] == ["Wi-Fi"]

    missing = await client.get("/rooms/999")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Quarto não encontrado"}


async def test_feature_catalog(client):
    features = (await client.get("/features")).json()
    assert {"key": "cafe", "name": "Café da Manhã"} in features
    assert len(features) == 9
