"""End-to-end tests through the HTTP and WebSocket surface."""

from datetime import timedelta

from grocerywatch.utils.dates import today


def _iso(offset: int) -> str:
    return (today() + timedelta(days=offset)).isoformat()


def _create(client, name="Milk", category="Dairy", offset=5, quantity=1):
    response = client.post(
        "/api/items",
        json={
            "productName": name,
            "category": category,
            "quantity": quantity,
            "expiryDate": _iso(offset),
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_health_check(client):
    _create(client)
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "items": 1,
        "connectedClients": 0,
    }


def test_create_and_get_item(client):
    created = _create(client, offset=10)

    assert created["status"] == "active"
    assert created["purchaseDate"] == today().isoformat()
    assert created["daysUntilExpiry"] == 10
    assert created["urgency"] == "fresh"

    fetched = client.get(f"/api/items/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["productName"] == "Milk"


def test_create_past_item_is_expired(client):
    assert _create(client, offset=-1)["status"] == "expired"


def test_create_rejects_bad_input(client):
    response = client.post(
        "/api/items",
        json={
            "productName": "",
            "category": "Candy",
            "quantity": 0,
            "expiryDate": "soon",
        },
    )
    assert response.status_code == 422


def test_unknown_item_is_404(client):
    assert client.get("/api/items/missing").status_code == 404
    assert client.delete("/api/items/missing").status_code == 404
    response = client.put("/api/items/missing", json={"quantity": 2})
    assert response.status_code == 404
    assert "missing" in response.json()["detail"]


def test_list_filters_by_status_and_category(client):
    _create(client, name="Apple", category="Fruits")
    _create(client, name="Old Bread", category="Grains", offset=-2)

    everything = client.get("/api/items").json()
    assert everything["total"] == 2
    assert [item["productName"] for item in everything["items"]] == [
        "Old Bread",
        "Apple",
    ]

    expired = client.get("/api/items", params={"status": "expired"}).json()
    assert [item["productName"] for item in expired["items"]] == [
        "Old Bread"
    ]

    fruits = client.get("/api/items", params={"category": "Fruits"}).json()
    assert [item["productName"] for item in fruits["items"]] == ["Apple"]


def test_expiring_endpoint(client):
    _create(client, name="Later", offset=3)
    _create(client, name="Soon", offset=1)
    _create(client, name="Far", offset=5)

    default = client.get("/api/items/expiring").json()
    assert default["windowDays"] == 3
    assert [item["productName"] for item in default["items"]] == [
        "Soon",
        "Later",
    ]

    wider = client.get("/api/items/expiring", params={"days": 5}).json()
    assert wider["total"] == 3


def test_update_consume_reactivate_delete(client):
    created = _create(client)
    item_id = created["id"]

    updated = client.put(
        f"/api/items/{item_id}",
        json={"quantity": 4, "expiryDate": _iso(-1)},
    ).json()
    assert updated["quantity"] == 4
    assert updated["status"] == "expired"

    consumed = client.post(f"/api/items/{item_id}/consume").json()
    assert consumed["status"] == "completed"
    assert consumed["completedDate"] == today().isoformat()

    reactivated = client.post(f"/api/items/{item_id}/reactivate").json()
    assert reactivated["status"] == "expired"
    assert reactivated["completedDate"] is None

    assert client.delete(f"/api/items/{item_id}").status_code == 204
    assert client.get(f"/api/items/{item_id}").status_code == 404


def test_scan_label(client):
    response = client.post(
        "/api/items/scan",
        json={"text": "FRESH STRAWBERRY\nBest Before: 07/04/2025\n6 pack"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "productName": "FRESH STRAWBERRY",
        "expiryDate": "2025-07-04",
        "quantity": 6,
        "category": "Fruits",
    }


def test_wasted_value_uses_offline_prices(client):
    empty = client.post("/api/items/wasted-value").json()
    assert empty == {
        "items": [],
        "totalWastedAmount": 0.0,
        "source": "fallback",
    }

    _create(client, name="Steak", category="Meat", offset=-1, quantity=2)
    _create(client, name="Cheese", category="Dairy", offset=-3)
    _create(client, name="Fresh", category="Dairy", offset=3)

    body = client.post("/api/items/wasted-value").json()
    assert body["source"] == "fallback"
    assert body["totalWastedAmount"] == 15.5
    assert {item["productName"] for item in body["items"]} == {
        "Steak",
        "Cheese",
    }


def test_expiry_check(client):
    _create(client, name="Soon", offset=1)

    body = client.post("/api/items/expiry-check").json()

    assert body == {
        "message": "Expiry check completed",
        "changedItems": 0,
        "expiringItems": 1,
    }


def test_recipes(client):
    _create(client, name="Chicken Thighs", category="Meat", offset=2)
    _create(client, name="Spinach", category="Vegetables", offset=1)

    search = client.post("/api/recipes/search", json={"query": "salad"})
    assert search.status_code == 200
    assert search.json()["source"] == "fallback"
    assert search.json()["recipes"][0]["title"] == "Fresh Garden Salad"
    assert set(search.json()["availableIngredients"]) == {
        "Chicken Thighs",
        "Spinach",
    }

    suggestions = client.post("/api/recipes/suggestions", json={}).json()
    assert [recipe["title"] for recipe in suggestions["recipes"]] == [
        "Quick Stir-Fry"
    ]

    nutrition = client.post(
        "/api/recipes/nutrition",
        json={"recipe": suggestions["recipes"][0]},
    ).json()
    assert nutrition["nutrition"]["calories"] == "150-200"


def test_suggestions_need_expiring_items(client):
    _create(client, offset=30)

    response = client.post("/api/recipes/suggestions", json={})
    assert response.status_code == 400

    missing = client.post(
        "/api/recipes/suggestions", json={"itemIds": ["missing"]}
    )
    assert missing.status_code == 404


def test_health_metrics_flow(client):
    empty = client.get("/api/health-metrics").json()
    assert empty["sugarLevel"] is None

    no_data = client.get("/api/health-metrics/risk-analysis").json()
    assert no_data["source"] == "none"
    assert no_data["analysis"]["riskLevel"] == "Unknown"

    recorded = client.post(
        "/api/health-metrics",
        json={"sugarLevel": 130, "cholesterol": 180},
    )
    assert recorded.status_code == 201
    assert recorded.json()["id"] is not None

    latest = client.get("/api/health-metrics").json()
    assert latest["sugarLevel"] == 130

    _create(client, name="Orange Juice", category="Beverages")
    analysis = client.get("/api/health-metrics/risk-analysis").json()
    assert analysis["source"] == "fallback"
    assert analysis["analysis"]["riskLevel"] == "High"
    assert analysis["analysis"]["avoidItems"][0].startswith("Orange Juice")


def test_health_facts(client):
    body = client.post("/api/health-metrics/facts", json={"count": 2}).json()
    assert body["source"] == "fallback"
    assert len(body["facts"]) == 2

    invalid = client.post("/api/health-metrics/facts", json={"count": 0})
    assert invalid.status_code == 422


def test_sugar_health_flow(client):
    empty = client.get("/api/sugar-health/data")
    assert empty.status_code == 200
    assert empty.json() == {"hbA1c": None, "lastUpdated": None}

    _create(client, name="Chocolate Cookies", category="Snacks")
    _create(client, name="Broccoli", category="Vegetables")
    eaten = _create(client, name="Honey", category="Pantry")
    client.post(f"/api/items/{eaten['id']}/consume")

    response = client.post("/api/sugar-health/update", json={"hbA1c": 6.1})
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["hbA1c"] == 6.1
    assert body["lastUpdated"] is not None
    assert body["source"] == "fallback"
    assert body["recommendations"]["hba1cRange"] == "Prediabetes"
    assert body["recommendations"]["highSugarItems"] == [
        "Chocolate Cookies (Snacks)"
    ]

    client.post("/api/sugar-health/update", json={"hbA1c": 7.2})
    assert client.get("/api/sugar-health/data").json()["hbA1c"] == 7.2


def test_sugar_health_rejects_out_of_range(client):
    for value in (0, -1, 20.5):
        response = client.post(
            "/api/sugar-health/update", json={"hbA1c": value}
        )
        assert response.status_code == 422
    assert client.get("/api/sugar-health/data").json()["hbA1c"] is None


def test_websocket_receives_changes_in_order(client):
    with client.websocket_connect("/ws") as websocket:
        created = _create(client, name="Soon", offset=1)
        client.put(f"/api/items/{created['id']}", json={"quantity": 2})
        client.delete(f"/api/items/{created['id']}")

        messages = [websocket.receive_json() for _ in range(4)]

    assert [message["type"] for message in messages] == [
        "item_added",
        "item_newly_expiring",
        "item_updated",
        "item_deleted",
    ]
    assert messages[0]["item"]["id"] == created["id"]
    assert messages[2]["item"]["quantity"] == 2
    assert messages[3] == {"type": "item_deleted", "itemId": created["id"]}


def test_websocket_gets_sweep_batch(client):
    _create(client, name="Soon", offset=0)

    with client.websocket_connect("/ws") as websocket:
        client.post("/api/items/expiry-check")
        message = websocket.receive_json()

    assert message["type"] == "items_expiring"
    assert [item["productName"] for item in message["items"]] == ["Soon"]

