"""API tests for /api/v1/documents."""

from tolva.app.db import models

BASE = "/api/v1/documents"


def _create(client, headers, **payload):
    body = {"fileName": "factura.pdf", **payload}
    resp = client.post(BASE, json=body, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()["documentId"]


class TestCreate:
    def test_requires_auth(self, client):
        resp = client.post(BASE, json={"fileName": "x.pdf"})
        assert resp.status_code == 401

    def test_rejects_invalid_token(self, client):
        resp = client.get(BASE, headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    def test_upload_is_pending_and_classified(self, client, auth_headers):
        doc_id = _create(
            client,
            auth_headers,
            storageUrl="https://files.example.com/edesur.pdf",
            providerId="edesur",
            amount="1234.5",
            currency=" ars ",
            dueDate="2025-10-15",
        )
        body = client.get(f"{BASE}/{doc_id}", headers=auth_headers).json()

        assert doc_id.startswith("DOC-")
        assert body["status"] == "pending"
        assert body["category"] == "electricity"
        assert body["amount"] == 1234.5
        assert body["totalAmount"] == 1234.5
        assert body["currency"] == "ARS"
        assert body["dueDate"].startswith("2025-10-15T12:00:00")

    def test_manual_entry_needs_review(self, client, auth_headers):
        doc_id = _create(client, auth_headers, provider="Metrogas", manualEntry=True, amount=10)
        body = client.get(f"{BASE}/{doc_id}", headers=auth_headers).json()
        assert body["status"] == "needs_review"
        assert body["category"] == "gas"
        assert body["manualEntry"] is True

    def test_validation_errors_are_400(self, client, auth_headers):
        resp = client.post(BASE, json={"fileName": "  ", "currency": "PESOS"}, headers=auth_headers)
        assert resp.status_code == 400
        assert "fileName es obligatorio" in resp.json()["detail"]
        assert "currency" in resp.json()["detail"]

    def test_negative_amount_is_rejected(self, client, auth_headers):
        resp = client.post(BASE, json={"fileName": "a.pdf", "amount": -5}, headers=auth_headers)
        assert resp.status_code == 400

    def test_invalid_storage_url_is_rejected(self, client, auth_headers):
        resp = client.post(BASE, json={"fileName": "a.pdf", "storageUrl": "ftp://x"}, headers=auth_headers)
        assert resp.status_code == 400

    def test_hoa_document_creates_summary(self, client, auth_headers, db_session):
        _create(
            client,
            auth_headers,
            category="hoa",
            amount=85000,
            periodStart="2025-10-01",
            hoaDetails={"unitCode": "7", "buildingCode": "torre"},
        )
        summary = db_session.query(models.HoaSummary).one()
        assert summary.id == "user-1_TORRE_0007_2025-10"
        assert summary.total_to_pay_unit == 85000


class TestReadAndOwnership:
    def test_list_is_scoped_to_owner(self, client, auth_headers, other_auth_headers):
        _create(client, auth_headers)
        _create(client, auth_headers)
        _create(client, other_auth_headers)

        docs = client.get(BASE, headers=auth_headers).json()["documents"]
        assert len(docs) == 2
        assert {d["userId"] for d in docs} == {"user-1"}

    def test_other_user_gets_403(self, client, auth_headers, other_auth_headers):
        doc_id = _create(client, auth_headers)
        assert client.get(f"{BASE}/{doc_id}", headers=other_auth_headers).status_code == 403
        assert client.patch(f"{BASE}/{doc_id}", json={"amount": 1}, headers=other_auth_headers).status_code == 403
        assert client.delete(f"{BASE}/{doc_id}", headers=other_auth_headers).status_code == 403

    def test_missing_document_is_404(self, client, auth_headers):
        assert client.get(f"{BASE}/DOC-NOPE", headers=auth_headers).status_code == 404

    def test_delete(self, client, auth_headers):
        doc_id = _create(client, auth_headers)
        resp = client.delete(f"{BASE}/{doc_id}", headers=auth_headers)
        assert resp.json() == {"success": True}
        assert client.get(f"{BASE}/{doc_id}", headers=auth_headers).status_code == 404


class TestPatch:
    def test_amount_only_on_hoa_document(self, client, auth_headers):
        doc_id = _create(client, auth_headers, category="hoa", amount=1000, periodStart="2025-10-01")

        body = client.patch(f"{BASE}/{doc_id}", json={"amount": 1500}, headers=auth_headers).json()

        assert body["amount"] == 1500
        assert body["totalAmount"] == 1500
        assert body["hoaDetails"]["totalToPayUnit"] == 1500
        assert body["category"] == "hoa"

    def test_total_to_pay_unit_only_on_hoa_document(self, client, auth_headers, db_session):
        doc_id = _create(client, auth_headers, category="hoa", amount=1000, periodStart="2025-10-01")

        body = client.patch(
            f"{BASE}/{doc_id}", json={"hoaDetails": {"totalToPayUnit": 1750}}, headers=auth_headers
        ).json()

        assert body["amount"] == 1750
        assert body["totalAmount"] == 1750

        summary = db_session.query(models.HoaSummary).one()
        assert summary.total_to_pay_unit == 1750
        assert summary.period_key == "2025-10"

    def test_hoa_patch_without_period_does_not_create_summary(self, client, auth_headers, db_session):
        doc_id = _create(client, auth_headers, category="hoa", amount=1000)
        resp = client.patch(f"{BASE}/{doc_id}", json={"amount": 1200}, headers=auth_headers)

        assert resp.status_code == 200
        assert db_session.query(models.HoaSummary).count() == 0

    def test_huge_period_year_does_not_break_patch(self, client, auth_headers, db_session):
        doc_id = _create(client, auth_headers, category="hoa", amount=1000)

        resp = client.patch(
            f"{BASE}/{doc_id}", json={"hoaDetails": {"periodYear": 1e12, "periodMonth": 3}}, headers=auth_headers
        )
        assert resp.status_code == 200, resp.text
        assert db_session.query(models.HoaSummary).count() == 0

        again = client.patch(f"{BASE}/{doc_id}", json={"amount": 1100}, headers=auth_headers)
        assert again.status_code == 200
        assert again.json()["amount"] == 1100

    def test_null_hoa_details_clears_non_hoa_document(self, client, auth_headers):
        doc_id = _create(client, auth_headers, providerId="edesur", hoaDetails={"unitCode": "5"})

        body = client.patch(f"{BASE}/{doc_id}", json={"hoaDetails": None}, headers=auth_headers).json()
        assert body["category"] == "electricity"
        assert body["hoaDetails"] is None

    def test_status_toggle_keeps_other_fields(self, client, auth_headers):
        doc_id = _create(client, auth_headers, provider="OSDE", amount=50, currency="ARS")

        body = client.patch(f"{BASE}/{doc_id}", json={"status": "paid"}, headers=auth_headers).json()
        assert body["status"] == "paid"
        assert body["category"] == "health"
        assert body["amount"] == 50
        assert body["currency"] == "ARS"

    def test_invalid_status_is_400(self, client, auth_headers):
        doc_id = _create(client, auth_headers)
        resp = client.patch(f"{BASE}/{doc_id}", json={"status": "archived"}, headers=auth_headers)
        assert resp.status_code == 400

    def test_null_clears_date(self, client, auth_headers):
        doc_id = _create(client, auth_headers, dueDate="2025-10-15")
        body = client.patch(f"{BASE}/{doc_id}", json={"dueDate": None}, headers=auth_headers).json()
        assert body["dueDate"] is None


def test_calendar_url(client, auth_headers):
    doc_id = _create(
        client,
        auth_headers,
        provider="Edesur",
        amount=1500,
        dueDate="2025-10-15",
        storageUrl="https://files.example.com/a.pdf",
    )
    url = client.get(f"{BASE}/{doc_id}/calendar-url", headers=auth_headers).json()["url"]

    assert url.startswith("https://calendar.google.com/calendar/render?action=TEMPLATE")
    assert "text=Pagar%20Edesur%20%241500" in url
    assert "dates=20251015/20251016" in url
