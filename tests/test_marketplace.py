from tests.conftest import data_url


def test_root_liveness(client):
    resp = client.get("/")

    assert resp.status_code == 200
    assert "running" in resp.text


def test_farm_directory(client, farmer):
    client.post(
        "/register",
        json={"email": "c@d.com", "password": "pw", "farmName": "Second", "address": "Z"},
    )

    resp = client.get("/api/farms")

    assert resp.status_code == 200
    farms = resp.json()
    assert [f["farmName"] for f in farms] == ["F", "Second"]
    for farm in farms:
        assert set(farm) == {"id", "email", "farmName", "address", "createdAt"}


def test_single_farm(client, farmer):
    resp = client.get(f"/api/farms/{farmer['id']}")

    assert resp.status_code == 200
    assert resp.json()["farmName"] == "F"
    assert "password" not in resp.json()


def test_single_farm_not_found(client, farmer):
    assert client.get("/api/farms/not-an-id").status_code == 404
    resp = client.get("/api/farms/00000000-0000-0000-0000-000000000000")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Farm not found"}


def test_feed_lists_only_goats_for_sale(client, goat_payload):
    listed = client.post(
        "/add-goat",
        json={**goat_payload, "photos": [data_url(b"listed-photo")]},
    ).json()["goat"]
    client.post("/add-goat", json={**goat_payload, "rfidTag": "T2", "name": "Private"})

    client.put(f"/update-goat/{listed['id']}", json={"forSale": True, "price": 120})

    resp = client.get("/api/goats")

    assert resp.status_code == 200
    feed = resp.json()
    assert len(feed) == 1
    item = feed[0]
    assert item["id"] == listed["id"]
    assert item["price"] == 120
    assert item["farmName"] == "F"
    assert item["address"] == "X"
    assert item["imageUrl"].startswith("/uploads/")

    assert client.get("/goats").json() == feed


def test_feed_newest_listed_first(client, goat_payload):
    for tag in ("T1", "T2", "T3"):
        client.post("/add-goat", json={**goat_payload, "rfidTag": tag, "forSale": True})

    feed = client.get("/api/goats").json()

    assert [g["rfidTag"] for g in feed] == ["T3", "T2", "T1"]
    assert all(g["imageUrl"] is None for g in feed)
