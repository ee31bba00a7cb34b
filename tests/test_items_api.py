# tests/test_items_api.py
from sqlalchemy import select

from db.models import ItemIdentifier
from tests.factories import link_identifier, make_identifier_type, make_item


async def test_create_item(client):
    r = await client.post("/api/items", json={"name": "Rice 5kg", "threshold": 2})

    assert r.status_code == 201, r.text
    body = r.json()
    assert isinstance(body["id"], int)
    assert body["name"] == "Rice 5kg"
    assert body["threshold"] == 2


async def test_create_item_trims_name_and_threshold_is_optional(client):
    r = await client.post("/api/items", json={"name": "  Lentils  "})

    assert r.status_code == 201, r.text
    assert r.json()["name"] == "Lentils"
    assert r.json()["threshold"] is None


async def test_create_item_rejects_blank_name(client):
    r = await client.post("/api/items", json={"name": "  "})

    assert r.status_code == 400
    assert r.json() == {"error": "name must be a non-empty string"}


async def test_create_item_rejects_non_numeric_threshold(client):
    r = await client.post("/api/items", json={"name": "Rice", "threshold": "lots"})

    assert r.status_code == 400
    assert r.json()["error"].startswith("threshold:")


async def test_list_items_sorted_by_name(client, database):
    await make_item(database, "Water")
    await make_item(database, "Beans", threshold=3)
    await make_item(database, "Pasta")

    r = await client.get("/api/items")

    assert r.status_code == 200
    items = r.json()["items"]
    assert [i["name"] for i in items] == ["Beans", "Pasta", "Water"]
    assert items[0]["threshold"] == 3


async def test_link_identifier(client, database):
    await make_identifier_type(database)
    item_id = await make_item(database, "Beans")

    r = await client.post("/api/item-identifiers", json={"itemId": item_id, "identifier": " 4006381333931 "})

    assert r.status_code == 200, r.text
    assert r.json() == {"success": True}
    async with database.session_maker() as s:
        res = await s.execute(select(ItemIdentifier).where(ItemIdentifier.item_id == item_id))
        assert [i.identifier for i in res.scalars().all()] == ["4006381333931"]

    r = await client.post("/api/scan", json={"barcode": "4006381333931", "mode": "STATUS"})
    assert r.json()["item"]["id"] == item_id


async def test_link_identifier_unknown_item(client, database):
    await make_identifier_type(database)

    r = await client.post("/api/item-identifiers", json={"itemId": 404, "identifier": "123"})

    assert r.status_code == 404
    assert r.json() == {"error": "Item not found"}


async def test_link_identifier_without_type_configured(client, database):
    item_id = await make_item(database, "Beans")

    r = await client.post("/api/item-identifiers", json={"itemId": item_id, "identifier": "123"})

    assert r.status_code == 500
    assert r.json() == {"error": "EAN13 identifier type not configured"}


async def test_link_identifier_validation(client):
    r = await client.post("/api/item-identifiers", json={"itemId": "1", "identifier": "123"})
    assert r.status_code == 400

    r = await client.post("/api/item-identifiers", json={"itemId": 1, "identifier": ""})
    assert r.status_code == 400
    assert r.json() == {"error": "identifier must be a non-empty string"}


async def test_link_identifier_twice_conflicts(client, database):
    first = await make_item(database, "Beans")
    second = await make_item(database, "Peas")
    await link_identifier(database, first, "123")

    r = await client.post("/api/item-identifiers", json={"itemId": second, "identifier": "123"})

    assert r.status_code == 409


async def test_whole_threshold_stays_a_json_integer(client):
    r = await client.post("/api/items", json={"name": "Rice 5kg", "threshold": 2})

    assert r.status_code == 201, r.text
    assert '"threshold":2}' in r.text
    assert type(r.json()["threshold"]) is int

    listed = (await client.get("/api/items")).json()["items"]
    assert type(listed[0]["threshold"]) is int


async def test_fractional_threshold_is_kept(client):
    r = await client.post("/api/items", json={"name": "Flour", "threshold": 2.5})

    assert r.status_code == 201, r.text
    assert r.json()["threshold"] == 2.5
