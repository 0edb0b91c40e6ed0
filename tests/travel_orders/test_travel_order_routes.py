from __future__ import annotations

import csv
import io

from hr_records.core.enums import Role

TRIP = {
    "start_date": "2026-03-03",
    "end_date": "2026-03-03",
    "destination": "Head office",
    "transportation_type": "Bus",
    "purpose": "Training",
}


def test_list_includes_transportation_types(client, login):
    login()
    client.post("/travel-orders", json=dict(TRIP, employee_ids=[1]))
    body = client.get("/travel-orders/list").get_json()
    assert [o["employee"]["idno"] for o in body["travelOrders"]] == ["E100"]
    assert "Company Vehicle" in body["transportationTypes"]


def test_create_from_form_with_repeated_ids(client, login):
    login()
    res = client.post(
        "/travel-orders",
        data=dict(TRIP, **{"employee_ids[]": ["1", "2"], "documents": (io.BytesIO(b"%PDF"), "memo.pdf")}),
        content_type="multipart/form-data",
    )
    body = res.get_json()
    assert res.status_code == 201
    assert body["created"] == 2
    order = body["data"][0]

    doc = client.get(f"/travel-orders/{order['id']}/documents/0")
    assert doc.status_code == 200
    assert doc.data == b"%PDF"
    doc.close()
    assert client.get(f"/travel-orders/{order['id']}/documents/3").status_code == 404


def test_bulk_update_and_force_approve(client, login):
    login(Role.SUPERADMIN, user_id=1)
    ids = [o["id"] for o in client.post("/travel-orders", json=dict(TRIP, employee_ids=[1, 2])).get_json()["data"]]

    res = client.post("/travel-orders/bulk-update", json={"travel_order_ids": ids[:1], "status": "approved"})
    assert res.get_json()["updated"] == ids[:1]

    res = client.post("/travel-orders/force-approve", json={"travel_order_ids": ids, "remarks": "Board trip"})
    body = res.get_json()
    assert body["updated"] == ids[1:]
    assert body["failed"][0]["id"] == ids[0]


def test_force_approve_forbidden_for_hrd(client, login):
    login(Role.HRD)
    order_id = client.post("/travel-orders", json=dict(TRIP, employee_ids=[1])).get_json()["data"][0]["id"]
    res = client.post(f"/travel-orders/{order_id}/status", json={"status": "force_approved"})
    assert res.status_code == 403
    assert res.get_json()["message"] == "Only superadmin can force approve travel orders."


def test_export_csv(client, login):
    login()
    client.post("/travel-orders", json=dict(TRIP, employee_ids=[2]))
    res = client.get("/travel-orders/export")
    assert res.mimetype == "text/csv"
    assert res.headers["Content-Disposition"].startswith("attachment; filename=travel_orders_")

    rows = list(csv.DictReader(io.StringIO(res.data.decode("utf-8-sig"))))
    assert len(rows) == 1
    assert rows[0]["employee_name"] == "Smith, John"
    assert rows[0]["is_full_day"] == "Yes"
    assert rows[0]["status"] == "pending"
