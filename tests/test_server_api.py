from fastapi.testclient import TestClient

from server.app import MAX_BUFFER_BYTES, create_app


def _create(client: TestClient, **payload) -> dict:
    response = client.post("/api/generators", json=payload)
    assert response.status_code == 200, response.text
    return response.json()


def test_health_and_operations() -> None:
    client = TestClient(create_app())
    assert client.get("/health").json() == {"status": "ok"}

    operations = client.get("/api/operations").json()["operations"]
    assert "next_int" in operations
    assert "fill_bytes" in operations


def test_seeded_generator_reproduces_golden_draws() -> None:
    client = TestClient(create_app())
    created = _create(client, seed=42)
    assert created["seed"] == 42
    assert created["variant"] == "seeded"

    generator_id = created["generator_id"]
    response = client.post(
        f"/api/generators/{generator_id}/draw",
        json={"op": "next_int", "args": [100], "count": 5},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["values"] == [66, 14, 12, 52, 16]
    assert payload["draws"] == 5

    detail = client.get(f"/api/generators/{generator_id}").json()
    assert detail["draws"] == 5


def test_overridable_variant_matches_seeded_output() -> None:
    client = TestClient(create_app())
    seeded_id = _create(client, seed=7, variant="seeded")["generator_id"]
    created = _create(client, seed=7, variant="overridable")
    assert created["variant"] == "overridable"

    for op, args in [("next_int64", []), ("fill_bytes", [6]), ("next_int", [-3, 3])]:
        body = {"op": op, "args": args, "count": 3}
        seeded = client.post(f"/api/generators/{seeded_id}/draw", json=body).json()
        overridable = client.post(
            f"/api/generators/{created['generator_id']}/draw", json=body
        ).json()
        assert seeded["values"] == overridable["values"]


def test_generator_without_seed_gets_one_assigned() -> None:
    client = TestClient(create_app())
    created = _create(client)
    assert 0 <= created["seed"] < 2**31 - 1


def test_invalid_draw_arguments_return_422() -> None:
    client = TestClient(create_app())
    generator_id = _create(client, seed=1)["generator_id"]

    response = client.post(
        f"/api/generators/{generator_id}/draw", json={"op": "next_int", "args": [-1]}
    )
    assert response.status_code == 422
    assert "max_value" in response.json()["detail"]

    response = client.post(f"/api/generators/{generator_id}/draw", json={"op": "shuffle"})
    assert response.status_code == 422

    response = client.post(
        f"/api/generators/{generator_id}/draw", json={"op": "next_int", "count": 0}
    )
    assert response.status_code == 422


def test_oversized_byte_buffers_return_422() -> None:
    client = TestClient(create_app())
    generator_id = _create(client, seed=42)["generator_id"]

    response = client.post(
        f"/api/generators/{generator_id}/draw",
        json={"op": "fill_bytes", "args": [MAX_BUFFER_BYTES + 1], "count": 3},
    )
    assert response.status_code == 422
    assert str(MAX_BUFFER_BYTES) in response.json()["detail"]

    response = client.post(
        f"/api/generators/{generator_id}/draw",
        json={"op": "next_bytes", "args": [2_000_000]},
    )
    assert response.status_code == 422
    assert client.get(f"/api/generators/{generator_id}").json()["draws"] == 0

    response = client.post(
        f"/api/generators/{generator_id}/draw",
        json={"op": "next_bytes", "args": [MAX_BUFFER_BYTES]},
    )
    assert response.status_code == 200
    assert len(response.json()["values"][0]) == MAX_BUFFER_BYTES


def test_seed_outside_int32_is_rejected() -> None:
    client = TestClient(create_app())
    response = client.post("/api/generators", json={"seed": 2**31})
    assert response.status_code == 422


def test_list_and_delete_generators() -> None:
    client = TestClient(create_app())
    first = _create(client, seed=1)["generator_id"]
    second = _create(client, seed=2)["generator_id"]

    listing = client.get("/api/generators").json()
    assert listing["total"] == 2
    assert {item["generator_id"] for item in listing["generators"]} == {first, second}

    deleted = client.delete(f"/api/generators/{first}")
    assert deleted.status_code == 200
    assert deleted.json() == {"generator_id": first, "deleted": True}

    assert client.get(f"/api/generators/{first}").status_code == 404
    assert client.delete(f"/api/generators/{first}").status_code == 404
    assert client.post(f"/api/generators/{first}/draw", json={"op": "next_int"}).status_code == 404


def test_generator_limit_is_enforced() -> None:
    client = TestClient(create_app(max_generators=1))
    _create(client, seed=1)

    response = client.post("/api/generators", json={"seed": 2})
    assert response.status_code == 429


def test_main_module_reads_environment(monkeypatch) -> None:
    import importlib

    import server.main as main_module

    monkeypatch.setenv("CRNG_MAX_GENERATORS", "1")
    monkeypatch.setenv("CRNG_CORS_ORIGINS", "http://example.test, ,http://other.test")
    main_module = importlib.reload(main_module)

    assert main_module.MAX_GENERATORS == 1
    assert main_module.CORS_ORIGINS == ["http://example.test", "http://other.test"]

    client = TestClient(main_module.app)
    _create(client, seed=1)
    assert client.post("/api/generators", json={"seed": 2}).status_code == 429
