"""API tests for POST /api/v1/parse."""

from tolva.app.core.errors import BillingParseError
from tolva.app.db import models
from tolva.app.schemas.billing import BillingParseResult, HoaDetails
from tolva.app.services import parser_service

PARSE = "/api/v1/parse"


def _upload(client, headers, storage_url="https://files.example.com/bill.pdf"):
    body = {"fileName": "bill.pdf", "storageUrl": storage_url}
    return client.post("/api/v1/documents", json=body, headers=headers).json()["documentId"]


def test_parse_writes_extracted_fields(client, auth_headers, monkeypatch):
    doc_id = _upload(client, auth_headers)
    seen = {}

    def fake_parse(url):
        seen["url"] = url
        return BillingParseResult(
            provider_id="metrogas",
            provider_name_detected="Metrogas S.A.",
            total_amount=8450.3,
            currency="ars",
            due_date="2025-11-03",
            text="METROGAS ...",
        )

    monkeypatch.setattr(parser_service, "parse_document_pdf", fake_parse)

    resp = client.post(PARSE, json={"documentId": f"  {doc_id} "}, headers=auth_headers)

    assert resp.status_code == 200, resp.text
    document = resp.json()["document"]
    assert seen["url"] == "https://files.example.com/bill.pdf"
    assert document["status"] == "parsed"
    assert document["category"] == "gas"
    assert document["provider"] == "Metrogas S.A."
    assert document["totalAmount"] == 8450.3
    assert document["currency"] == "ARS"
    assert document["dueDate"].startswith("2025-11-03")
    assert resp.json()["result"]["providerId"] == "metrogas"


def test_parse_hoa_upserts_summary(client, auth_headers, monkeypatch, db_session):
    doc_id = _upload(client, auth_headers)
    monkeypatch.setattr(
        parser_service,
        "parse_document_pdf",
        lambda url: BillingParseResult(
            category="hoa",
            hoa_details=HoaDetails(unit_code="5", period_year=2025, period_month=10, total_to_pay_unit=91000.0),
        ),
    )

    resp = client.post(PARSE, json={"documentId": doc_id}, headers=auth_headers)

    assert resp.json()["document"]["amount"] == 91000.0
    summary = db_session.query(models.HoaSummary).one()
    assert summary.id == "user-1_EDIFICIO_0005_2025-10"


def test_parse_failure_marks_error_and_returns_502(client, auth_headers, monkeypatch):
    doc_id = _upload(client, auth_headers)

    def failing(url):
        raise BillingParseError(message="No se pudo descargar el PDF", stage="download")

    monkeypatch.setattr(parser_service, "parse_document_pdf", failing)

    resp = client.post(PARSE, json={"documentId": doc_id}, headers=auth_headers)

    assert resp.status_code == 502
    assert resp.json()["detail"] == "No se pudo descargar el PDF"
    doc = client.get(f"/api/v1/documents/{doc_id}", headers=auth_headers).json()
    assert doc["status"] == "error"


def test_parse_without_pdf_is_400(client, auth_headers):
    doc_id = client.post(
        "/api/v1/documents", json={"fileName": "manual"}, headers=auth_headers
    ).json()["documentId"]
    assert client.post(PARSE, json={"documentId": doc_id}, headers=auth_headers).status_code == 400


def test_document_id_is_required(client, auth_headers):
    for body in ({}, {"documentId": "   "}, {"documentId": None}):
        resp = client.post(PARSE, json=body, headers=auth_headers)
        assert resp.status_code == 400


def test_numeric_document_id_is_accepted(client, auth_headers):
    assert client.post(PARSE, json={"documentId": 123}, headers=auth_headers).status_code == 404


def test_parse_other_users_document_is_403(client, auth_headers, other_auth_headers):
    doc_id = _upload(client, auth_headers)
    assert client.post(PARSE, json={"documentId": doc_id}, headers=other_auth_headers).status_code == 403
