"""Тесты клиента Gemini: разбор ответа модели и обработка ошибок."""
import base64
import json

import httpx
import pytest

from app.clients.gemini import GeminiImageExtractor, parse_model_output
from app.core.exceptions import ExtractionError


def _client(handler) -> httpx.Client:
    return httpx.Client(base_url="https://gemini.test/v1beta", transport=httpx.MockTransport(handler))


def _model_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class TestParseModelOutput:

    def test_plain_json(self):
        assert parse_model_output('{"name": "Aspirin", "expiryDate": null, "batchNumber": null}') == {
            "name": "Aspirin", "expiryDate": None, "batchNumber": None,
        }

    def test_json_inside_markdown(self):
        text = 'Here you go:\n```json\n{"name": "Aspirin", "expiryDate": "2027-01-31"}\n```'
        assert parse_model_output(text)["expiryDate"] == "2027-01-31"

    def test_no_json(self):
        with pytest.raises(ExtractionError):
            parse_model_output("I cannot read this image")

    def test_malformed_json(self):
        with pytest.raises(ExtractionError):
            parse_model_output('{"name": "Aspirin",}')


class TestGeminiImageExtractor:

    def test_extract_sends_image_and_parses_reply(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=_model_reply(
                '{"name": "Ibuprofen 200mg", "expiryDate": "2026-11-30", "batchNumber": "B77"}'
            ))

        extractor = GeminiImageExtractor(api_key="g-key", model="test-model", client=_client(handler))
        result = extractor.extract(b"\x89PNG", "image/png")

        assert result == {"name": "Ibuprofen 200mg", "expiryDate": "2026-11-30", "batchNumber": "B77"}
        request = requests[0]
        assert request.url.path == "/v1beta/models/test-model:generateContent"
        assert request.url.params["key"] == "g-key"
        inline = json.loads(request.content)["contents"][0]["parts"][1]["inline_data"]
        assert inline["mime_type"] == "image/png"
        assert base64.b64decode(inline["data"]) == b"\x89PNG"

    def test_http_error_becomes_extraction_error(self):
        extractor = GeminiImageExtractor(
            api_key="g-key", client=_client(lambda r: httpx.Response(500, text="boom")),
        )
        with pytest.raises(ExtractionError) as exc_info:
            extractor.extract(b"img", "image/jpeg")
        assert exc_info.value.detail == "Failed to analyze image"

    def test_unexpected_shape(self):
        extractor = GeminiImageExtractor(
            api_key="g-key", client=_client(lambda r: httpx.Response(200, json={"candidates": []})),
        )
        with pytest.raises(ExtractionError):
            extractor.extract(b"img", "image/jpeg")

    def test_missing_api_key(self):
        extractor = GeminiImageExtractor(api_key="", client=_client(lambda r: httpx.Response(200)))
        with pytest.raises(ExtractionError):
            extractor.extract(b"img", "image/jpeg")
