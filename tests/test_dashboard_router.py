"""API tests for /api/v1/dashboard and /api/v1/hoa/summaries."""

import pytest

from tolva.app.core.constants import CATEGORY_ORDER


def _doc(client, headers, **payload):
    resp = client.post("/api/v1/documents", json={"fileName": "f.pdf", **payload}, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()["documentId"]


def test_dashboard_totals_for_month(client, auth_headers, other_auth_headers):
    _doc(client, auth_headers, providerId="edesur", amount=100, dueDate="2025-10-05")
    _doc(client, auth_headers, providerId="metrogas", amount=40, totalAmount=50, issueDate="2025-10-20")
    _doc(client, auth_headers, category="hoa", amount=1000, periodStart="2025-10-01")
    # other month / other user
    _doc(client, auth_headers, providerId="edesur", amount=999, dueDate="2025-09-30")
    _doc(client, other_auth_headers, providerId="edesur", amount=777, dueDate="2025-10-05")

    client.post("/api/v1/income", json={"amount": 2000, "date": "2025-10-01"}, headers=auth_headers)
    client.post("/api/v1/income", json={"amount": 5000, "date": "2025-11-01"}, headers=auth_headers)

    body = client.get("/api/v1/dashboard", params={"year": 2025, "month": 10}, headers=auth_headers).json()

    by_category = {c["category"]: c["total"] for c in body["categories"]}
    assert [c["category"] for c in body["categories"]] == [c.value for c in CATEGORY_ORDER]
    assert by_category["electricity"] == 100
    assert by_category["gas"] == 50  # totalAmount wins over amount
    assert by_category["hoa"] == 1000
    assert by_category["water"] == 0
    assert body["spendTotal"] == pytest.approx(1150)
    assert body["incomeTotal"] == pytest.approx(2000)
    assert body["balance"] == pytest.approx(850)
    assert body["documents"]["total"] == 3
    assert body["documents"]["pending"] == 0
    assert body["documents"]["needsReview"] == 3


def test_dashboard_rejects_invalid_month(client, auth_headers):
    resp = client.get("/api/v1/dashboard", params={"month": 13}, headers=auth_headers)
    assert resp.status_code == 400


def test_hoa_summaries_endpoint(client, auth_headers):
    _doc(client, auth_headers, category="hoa", amount=1000, periodStart="2025-09-01",
         hoaDetails={"unitCode": "5", "rubros": [{"label": "Luz", "total": 100}]})
    _doc(client, auth_headers, category="hoa", amount=1200, periodStart="2025-10-01",
         hoaDetails={"unitCode": "5"})
    _doc(client, auth_headers, category="hoa", amount=900, periodStart="2025-10-01",
         hoaDetails={"unitCode": "8"})

    summaries = client.get("/api/v1/hoa/summaries", headers=auth_headers).json()["summaries"]
    assert [s["periodKey"] for s in summaries] == ["2025-10", "2025-10", "2025-09"]

    filtered = client.get(
        "/api/v1/hoa/summaries", params={"unitCode": "0005"}, headers=auth_headers
    ).json()["summaries"]
    assert [s["totalToPayUnit"] for s in filtered] == [1200, 1000]
    assert filtered[1]["periodKey"] == "2025-09"
    assert filtered[1]["rubrosTotal"] == 100
    assert filtered[1]["rubrosWithTotals"][0]["share"] == 100
