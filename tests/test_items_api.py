from conftest import order_payload

MEASUREMENTS = {"length": "2", "width": "3", "material": "Silk", "state": "Good"}


def create_order(client, order_id="ORD-001", items=None):
    r = client.post("/api/orders/", json=order_payload(order_id=order_id, items=items))
    assert r.status_code == 201
    return r.json()


def test_measuring_item_prices_it(client):
    create_order(client)
    r = client.put("/api/orders/ORD-001/items/1", json=MEASUREMENTS)
    assert r.status_code == 200
    item = r.json()
    assert item["status"] == "measured"
    assert item["cleaning_cost"] == 300.0

    order = client.get("/api/orders/ORD-001").json()
    assert order["cleaning_total"] == 300.0
    assert order["grand_total"] == 300.0


def test_patch_leaves_other_fields(client):
    create_order(client)
    client.put("/api/orders/ORD-001/items/1", json=MEASUREMENTS)
    r = client.put("/api/orders/ORD-001/items/1", json={"photo": "rug1.jpg"})
    item = r.json()
    assert item["photo"] == "rug1.jpg"
    assert item["length"] == "2"
    assert item["material"] == "Silk"
    assert item["cleaning_cost"] == 300.0


def test_incomplete_measurement_rejected(client):
    create_order(client)
    r = client.put("/api/orders/ORD-001/items/1", json={"status": "measured", "length": "2"})
    assert r.status_code == 400
    assert client.get("/api/orders/ORD-001/items/1").json()["status"] == "pending"


def test_unknown_fields_rejected(client):
    create_order(client)
    r = client.put("/api/orders/ORD-001/items/1", json={"cleaning_cost": 1.0})
    assert r.status_code == 422
    r = client.put("/api/orders/ORD-001/items/1", json={"status": "cleaning_estimated"})
    assert r.status_code == 422


def test_item_not_found(client):
    create_order(client)
    assert client.put("/api/orders/ORD-001/items/9", json={"photo": "x.jpg"}).status_code == 404
    assert client.put("/api/orders/ORD-404/items/1", json={"photo": "x.jpg"}).status_code == 404


def test_ready_blocked_while_awaiting_approval(client):
    create_order(client, items=[{"id": "1"}])
    client.put("/api/orders/ORD-001/items/1", json=MEASUREMENTS)
    client.put("/api/orders/ORD-001", json={"requires_approval": True})

    r = client.put("/api/orders/ORD-001/items/1", json={"status": "ready_for_delivery"})
    assert r.status_code == 409
    assert client.get("/api/orders/ORD-001/items/1").json()["status"] == "measured"

    client.post("/api/orders/ORD-001/approval", json={"decision": "approved"})
    r = client.put("/api/orders/ORD-001/items/1", json={"status": "ready_for_delivery"})
    assert r.status_code == 200
    assert r.json()["status"] == "ready_for_delivery"

    r = client.put("/api/orders/ORD-001/items/1", json={"status": "delivered"})
    assert r.json()["status"] == "delivered"


def test_ready_without_approval_gate(client):
    create_order(client, items=[{"id": "1"}])
    client.put("/api/orders/ORD-001/items/1", json=MEASUREMENTS)
    r = client.put("/api/orders/ORD-001/items/1", json={"status": "ready_for_delivery"})
    assert r.status_code == 200


def test_no_back_transition(client):
    create_order(client, items=[{"id": "1"}])
    client.put("/api/orders/ORD-001/items/1", json=MEASUREMENTS)
    client.put("/api/orders/ORD-001/items/1", json={"status": "ready_for_delivery"})
    r = client.put("/api/orders/ORD-001/items/1", json={"status": "pending"})
    assert r.status_code == 409


def test_auto_escalation_when_all_items_measured(client):
    create_order(client)
    client.put("/api/orders/ORD-001", json={"requires_approval": True})
    # Staff hold the request back until the rugs are inspected
    r = client.put("/api/orders/ORD-001", json={"approval_status": "not_needed"})
    assert r.json()["approval_status"] == "not_needed"

    client.put("/api/orders/ORD-001/items/1", json=MEASUREMENTS)
    assert client.get("/api/orders/ORD-001").json()["approval_status"] == "not_needed"

    client.put("/api/orders/ORD-001/items/2", json=MEASUREMENTS)
    assert client.get("/api/orders/ORD-001").json()["approval_status"] == "pending"


def test_no_escalation_without_flag(client):
    create_order(client)
    client.put("/api/orders/ORD-001/items/1", json=MEASUREMENTS)
    client.put("/api/orders/ORD-001/items/2", json=MEASUREMENTS)
    assert client.get("/api/orders/ORD-001").json()["approval_status"] == "not_needed"


def test_repair_estimate(client):
    create_order(client, items=[{"id": "1"}])
    client.put("/api/orders/ORD-001/items/1", json={**MEASUREMENTS, "state": "Damaged"})

    r = client.put(
        "/api/orders/ORD-001/items/1/repair-estimate",
        json={"repair_cost": 80, "repair_description": "Re-bind edges"},
    )
    assert r.status_code == 200
    item = r.json()
    assert item["status"] == "repair_estimated"
    assert item["repair_cost"] == 80.0
    assert item["repair_description"] == "Re-bind edges"

    order = client.get("/api/orders/ORD-001").json()
    assert order["repair_total"] == 80.0
    assert order["grand_total"] == 380.0


def test_repair_estimate_validation(client):
    create_order(client, items=[{"id": "1"}])
    r = client.put("/api/orders/ORD-001/items/1/repair-estimate", json={"repair_cost": 80})
    assert r.status_code == 422
    r = client.put(
        "/api/orders/ORD-001/items/1/repair-estimate",
        json={"repair_cost": -5, "repair_description": "x"},
    )
    assert r.status_code == 422


def test_repair_estimated_item_can_be_delivered(client):
    create_order(client, items=[{"id": "1"}])
    client.put("/api/orders/ORD-001/items/1", json=MEASUREMENTS)
    client.put(
        "/api/orders/ORD-001/items/1/repair-estimate",
        json={"repair_cost": 40, "repair_description": "Fringe"},
    )
    r = client.put("/api/orders/ORD-001/items/1", json={"status": "ready_for_delivery"})
    assert r.status_code == 200
    assert r.json()["repair_cost"] == 40.0


def test_repair_queue(client, seed_order):
    seed_order("ORD-001", ["measured", "repair_needed"])
    create_order(client, order_id="ORD-002", items=[{"id": "1", "state": "Worn"}, {"id": "2", "state": "Good"}])

    r = client.get("/api/repairs/")
    assert r.status_code == 200
    queue = {(item["order_id"], item["id"]) for item in r.json()}
    assert queue == {("ORD-001", "2"), ("ORD-002", "1")}
    assert all(item["has_estimate"] is False for item in r.json())
