"""Tests for the billing parse orchestrator (LLM and PDF download are faked)."""

import json
from types import SimpleNamespace

import fitz
import openai
import pytest
import requests

from tolva.app.core.errors import BillingParseError
from tolva.app.services import parser_service


def _pdf_bytes(*lines):
    doc = fitz.open()
    page = doc.new_page()
    y = 72
    for line in lines:
        page.insert_text((72, y), line)
        y += 14
    data = doc.tobytes()
    doc.close()
    return data


class FakeResponses:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.response


def _fake_client(monkeypatch, response=None, error=None):
    responses = FakeResponses(response=response, error=error)
    monkeypatch.setattr(parser_service, "get_openai_client", lambda: SimpleNamespace(responses=responses))
    return responses


class TestExtractRelevantText:
    def test_sections_and_money_lines(self):
        lines = [f"linea {i}" for i in range(200)]
        lines[100] = "TOTAL A PAGAR $ 1.234,56"
        lines[101] = "Vencimiento 15/10/2025"
        lines[102] = "TOTAL A PAGAR $ 1.234,56"
        text = parser_service.extract_relevant_text("\n".join(lines))

        assert text.startswith("=== FIRST LINES ===\nlinea 0\n")
        assert "=== MONEY LINES ===\nTOTAL A PAGAR $ 1.234,56\nVencimiento 15/10/2025\n=== LAST LINES ===" in text
        assert "linea 60" not in text
        assert text.endswith("linea 199")

    def test_truncated_to_max_chars(self):
        text = parser_service.extract_relevant_text("\n".join("x" * 500 for _ in range(200)))
        assert len(text) == parser_service.MAX_RELEVANT_CHARS

    def test_blank_lines_are_dropped(self):
        text = parser_service.extract_relevant_text("  a  \n\n   \nb")
        assert "=== FIRST LINES ===\na\nb\n" in text


class TestExtractJsonFromResponse:
    def test_output_text(self):
        assert parser_service.extract_json_from_response({"output_text": ' {"a": 1} '}) == '{"a": 1}'

    def test_message_content(self):
        response = SimpleNamespace(
            output_text="",
            output=[
                SimpleNamespace(type="reasoning", content=None, text=None),
                SimpleNamespace(type="message", content=[SimpleNamespace(type="output_text", text='{"b": 2}')]),
            ],
        )
        assert parser_service.extract_json_from_response(response) == '{"b": 2}'

    def test_plain_text_item(self):
        response = {"output": [None, {"type": "output_text", "text": '{"c": 3}'}]}
        assert parser_service.extract_json_from_response(response) == '{"c": 3}'

    def test_no_text_raises(self):
        with pytest.raises(BillingParseError) as exc:
            parser_service.extract_json_from_response({"output": [{"type": "message", "content": []}]})
        assert exc.value.stage == "llm"


class TestPdf:
    def test_extract_pdf_text(self):
        text = parser_service.extract_pdf_text(_pdf_bytes("EDESUR", "TOTAL $ 1.500,00"))
        assert "EDESUR" in text
        assert "TOTAL" in text

    def test_unreadable_pdf(self):
        with pytest.raises(BillingParseError) as exc:
            parser_service.extract_pdf_text(b"definitely not a pdf")
        assert exc.value.stage == "pdf"

    def test_download_failure(self, monkeypatch):
        def boom(url, timeout):
            raise requests.ConnectionError("down")

        monkeypatch.setattr(parser_service.requests, "get", boom)
        with pytest.raises(BillingParseError) as exc:
            parser_service.fetch_pdf_bytes("https://files.example.com/a.pdf")
        assert exc.value.stage == "download"


class TestParsePdfWithOpenAI:
    def test_happy_path_is_sanitized(self, monkeypatch):
        payload = {
            "text": None,
            "providerId": "edesur",
            "totalAmount": "1.500,00",
            "currency": "ARS",
            "dueDate": "2025-10-15",
            "hoaDetails": None,
        }
        responses = _fake_client(monkeypatch, response={"output_text": json.dumps(payload)})

        result = parser_service.parse_pdf_with_openai(_pdf_bytes("EDESUR", "TOTAL $ 1.500,00"))

        assert result.provider_id == "edesur"
        assert result.total_amount == pytest.approx(1500.0)
        # text falls back to the PDF's full text
        assert "EDESUR" in result.text

        call = responses.calls[0]
        assert call["text"]["format"]["name"] == "billing_parse_result"
        assert call["input"][0]["role"] == "system"
        assert "TOTAL $ 1.500,00" in call["input"][1]["content"][0]["text"]

    def test_invalid_json(self, monkeypatch):
        _fake_client(monkeypatch, response={"output_text": "not json"})
        with pytest.raises(BillingParseError) as exc:
            parser_service.parse_pdf_with_openai(_pdf_bytes("x"))
        assert exc.value.code == "llm_invalid_json"

    def test_provider_error(self, monkeypatch):
        _fake_client(monkeypatch, error=openai.OpenAIError("boom"))
        with pytest.raises(BillingParseError) as exc:
            parser_service.parse_pdf_with_openai(_pdf_bytes("x"))
        assert exc.value.stage == "llm"

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.setattr(parser_service.settings, "OPENAI_API_KEY", None)
        parser_service.get_openai_client.cache_clear()
        with pytest.raises(BillingParseError) as exc:
            parser_service.get_openai_client()
        assert exc.value.code == "llm_not_configured"
