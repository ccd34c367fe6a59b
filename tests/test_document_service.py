"""Unit tests for PATCH reconciliation of documents (amount <-> HOA fields)."""

from datetime import datetime, timezone

import pytest

from tolva.app.core.constants import BillCategory, DocumentStatus
from tolva.app.db import models
from tolva.app.schemas.billing import BillingParseResult, HoaDetails
from tolva.app.schemas.documents import DocumentUpdateSchema
from tolva.app.services.document_service import apply_parse_result, build_document_updates


def _hoa_doc(**overrides):
    data = dict(
        id="DOC-1",
        user_id="user-1",
        file_name="expensas.pdf",
        category=BillCategory.HOA,
        amount=1000.0,
        total_amount=1000.0,
        status=DocumentStatus.PARSED,
        hoa_details={"buildingCode": "TORRE", "unitCode": "0005", "totalToPayUnit": 1000.0, "ownerName": "Ana"},
    )
    data.update(overrides)
    return models.BillDocument(**data)


def _patch(payload):
    return DocumentUpdateSchema.model_validate(payload)


def test_amount_only_patch_on_hoa_document_updates_total_to_pay_unit():
    updates = build_document_updates(_hoa_doc(), _patch({"amount": 1500}))

    assert updates["amount"] == 1500
    assert updates["total_amount"] == 1500
    assert updates["hoa_details"]["totalToPayUnit"] == 1500
    assert updates["hoa_details"]["ownerName"] == "Ana"


def test_total_to_pay_unit_only_patch_updates_top_level_amount():
    updates = build_document_updates(_hoa_doc(), _patch({"hoaDetails": {"totalToPayUnit": "2.300"}}))

    assert updates["amount"] == pytest.approx(2300.0)
    assert updates["total_amount"] == pytest.approx(2300.0)
    assert updates["hoa_details"]["totalToPayUnit"] == pytest.approx(2300.0)


def test_explicit_amount_wins_when_both_sides_are_sent():
    updates = build_document_updates(
        _hoa_doc(), _patch({"amount": 900, "hoaDetails": {"totalToPayUnit": 5000}})
    )
    assert updates["amount"] == 900
    assert updates["hoa_details"]["totalToPayUnit"] == 900


def test_absent_fields_are_untouched_and_null_clears():
    updates = build_document_updates(_hoa_doc(provider="Consorcio"), _patch({"provider": None}))

    assert updates["provider"] is None
    assert "currency" not in updates
    assert "due_date" not in updates
    assert "amount" not in updates


def test_explicit_null_hoa_details_clears_non_hoa_document():
    doc = _hoa_doc(category=BillCategory.ELECTRICITY)
    updates = build_document_updates(doc, _patch({"hoaDetails": None}))

    assert "hoa_details" in updates
    assert updates["hoa_details"] is None


def test_explicit_null_hoa_details_keeps_hoa_data():
    updates = build_document_updates(_hoa_doc(), _patch({"hoaDetails": None}))

    assert updates["hoa_details"]["ownerName"] == "Ana"
    assert updates["hoa_details"]["totalToPayUnit"] == 1000.0


def test_non_object_hoa_details_is_ignored():
    doc = _hoa_doc(category=BillCategory.ELECTRICITY)
    assert "hoa_details" not in build_document_updates(doc, _patch({"hoaDetails": "x"}))


def test_total_amount_patch_is_not_reverted_by_total_to_pay_unit():
    updates = build_document_updates(_hoa_doc(), _patch({"totalAmount": 1200}))

    assert updates["total_amount"] == 1200
    assert "amount" not in updates
    assert updates["hoa_details"]["totalToPayUnit"] == 1000.0


def test_category_is_preserved_when_not_sent():
    updates = build_document_updates(_hoa_doc(), _patch({"status": "paid"}))

    assert "category" not in updates
    assert updates["status"] == DocumentStatus.PAID
    # still reconciled as HOA
    assert "hoa_details" in updates


def test_explicit_category_is_classified():
    updates = build_document_updates(_hoa_doc(), _patch({"category": "Electricity"}))
    assert updates["category"] == BillCategory.ELECTRICITY
    # not HOA any more: no reconciliation of the nested amount
    assert "hoa_details" not in updates


def test_period_start_derives_year_month_and_drops_cached_key():
    doc = _hoa_doc(hoa_details={"periodKey": "2024-01", "periodLabel": "ENERO/2024", "totalToPayUnit": 1000.0})
    updates = build_document_updates(doc, _patch({"periodStart": "2025-10-01"}))

    hoa = updates["hoa_details"]
    assert hoa["periodYear"] == 2025
    assert hoa["periodMonth"] == 10
    assert "periodKey" not in hoa
    assert "periodLabel" not in hoa
    assert updates["period_start"] == datetime(2025, 10, 1, 12, tzinfo=timezone.utc)


def test_existing_period_start_is_used_when_not_in_patch():
    doc = _hoa_doc(period_start=datetime(2025, 3, 1, 12, tzinfo=timezone.utc))
    updates = build_document_updates(doc, _patch({"amount": 10}))
    assert updates["hoa_details"]["periodYear"] == 2025
    assert updates["hoa_details"]["periodMonth"] == 3


def test_non_hoa_amount_patch_mirrors_total_amount_only():
    doc = _hoa_doc(category=BillCategory.GAS, hoa_details=None)
    updates = build_document_updates(doc, _patch({"amount": 321.5}))
    assert updates["total_amount"] == 321.5
    assert "hoa_details" not in updates


class TestApplyParseResult:
    def test_parsed_with_amount(self):
        doc = _hoa_doc(category=BillCategory.OTHER, hoa_details=None, amount=None, total_amount=None)
        result = BillingParseResult(
            provider_id="edesur",
            provider_name_detected="Edesur S.A.",
            total_amount=5230.75,
            currency="ars",
            due_date="2025-10-20",
            text="texto",
        )
        apply_parse_result(doc, result)

        assert doc.category == BillCategory.ELECTRICITY
        assert doc.amount == doc.total_amount == 5230.75
        assert doc.currency == "ARS"
        assert doc.due_date == datetime(2025, 10, 20, 12, tzinfo=timezone.utc)
        assert doc.status == DocumentStatus.PARSED

    def test_hoa_amount_comes_from_total_to_pay_unit(self):
        doc = _hoa_doc(hoa_details=None, amount=None, total_amount=None)
        result = BillingParseResult(
            category="hoa",
            hoa_details=HoaDetails(total_to_pay_unit=88000.0, period_year=2025, period_month=9),
        )
        apply_parse_result(doc, result)

        assert doc.amount == 88000.0
        assert doc.hoa_details["totalToPayUnit"] == 88000.0
        assert doc.status == DocumentStatus.PARSED

    def test_without_amount_needs_review(self):
        doc = _hoa_doc(category=BillCategory.OTHER, hoa_details=None, amount=None, total_amount=None)
        apply_parse_result(doc, BillingParseResult(currency="pesos"))
        assert doc.status == DocumentStatus.NEEDS_REVIEW
        assert doc.currency is None
