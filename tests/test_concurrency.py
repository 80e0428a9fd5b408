import threading

from sqlmodel import Session, select

from app.models.goat import Goat
from app.models.image import Image
from tests.conftest import data_url


def _register(client):
    resp = client.post(
        "/register",
        json={"email": "herd@farm.com", "password": "pw", "farmName": "F", "address": "X"},
    )
    assert resp.status_code == 201
    return resp.json()


def _run_together(*calls):
    """Start every call at the same time and collect results in call order."""
    barrier = threading.Barrier(len(calls))
    results = [None] * len(calls)

    def run(i, call):
        barrier.wait()
        results[i] = call()

    threads = [threading.Thread(target=run, args=(i, c)) for i, c in enumerate(calls)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return results


def test_parallel_upserts_on_one_tag_keep_a_single_batch(file_app, file_client, upload_dir):
    farmer = _register(file_client)
    base = {"rfidTag": "T1", "name": "G1", "gender": "Female", "owner": farmer["id"]}
    batch_a = [data_url(b"alpha" + str(i).encode()) for i in range(3)]
    batch_b = [data_url(b"bravo" + str(i).encode()) for i in range(2)]

    results = _run_together(
        lambda: file_client.post("/add-goat", json={**base, "photos": batch_a}),
        lambda: file_client.post("/add-goat", json={**base, "photos": batch_b}),
    )

    assert [r.status_code for r in results] == [201, 201]

    with Session(file_app.state.engine) as session:
        goats = session.exec(select(Goat)).all()
        rows = session.exec(select(Image)).all()

    assert len(goats) == 1
    assert all(row.goat_id == goats[0].id for row in rows)

    files = {p.name: p.read_bytes() for p in upload_dir.iterdir()}
    assert set(files) == {row.filename for row in rows}

    prefixes = {content[:5] for content in files.values()}
    assert prefixes in ({b"alpha"}, {b"bravo"})
    assert len(files) == (3 if prefixes == {b"alpha"} else 2)


def test_parallel_deletes_of_one_goat(file_app, file_client):
    farmer = _register(file_client)
    goat = file_client.post(
        "/add-goat",
        json={
            "rfidTag": "T1",
            "name": "G1",
            "gender": "Male",
            "owner": farmer["id"],
            "photos": [data_url(b"x")],
        },
    ).json()["goat"]

    results = _run_together(
        lambda: file_client.delete(f"/delete-goat/{goat['id']}"),
        lambda: file_client.delete(f"/delete-goat/{goat['id']}"),
    )

    assert sorted(r.status_code for r in results) == [200, 404]
    with Session(file_app.state.engine) as session:
        assert session.exec(select(Goat)).all() == []
        assert session.exec(select(Image)).all() == []
