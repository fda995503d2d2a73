"""
HTTP клиент Gemini для распознавания упаковки лекарства по фото.
"""
import base64
import json
import logging
import re
from typing import Any, Optional

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from app.core.config import settings
from app.core.exceptions import ExtractionError

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """Analyze this medicine package image and extract the following information:
1. Medicine Name (look for product name, brand name, or drug name)
2. Expiry Date (look for "EXP", "Expiry", or similar indicators, convert to YYYY-MM-DD format)
3. Batch Number (look for "Batch", "LOT", "B.No.", or similar indicators)

Format the response as a JSON object with these exact keys:
{
  "name": "Medicine Name",
  "expiryDate": "YYYY-MM-DD",
  "batchNumber": "BATCH123"
}

Rules:
- For medicine name, include the strength/dosage if visible
- For expiry date, convert any date format to YYYY-MM-DD
- For batch number, include only the alphanumeric value
- If any information is not visible or unclear, use null for that field
- Do not include any additional fields
- Return ONLY the JSON object, no other text"""

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def parse_model_output(text: str) -> dict[str, Any]:
    """Достаёт JSON объект из ответа модели (модель может добавить лишний текст)."""
    match = _JSON_OBJECT_RE.search(text or "")
    if not match:
        raise ExtractionError("No valid JSON found in the response")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ExtractionError(f"Malformed JSON in the response: {e}")
    if not isinstance(data, dict):
        raise ExtractionError("No valid JSON found in the response")
    return data


class GeminiImageExtractor:
    """Вызывает generateContent с изображением и промптом."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.base_url = (base_url or settings.GEMINI_API_URL).rstrip("/")
        self._client = client

    def _get_client(self) -> httpx.Client:
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(base_url=self.base_url, timeout=settings.HTTP_TIMEOUT)
        return self._client

    # Повторяем только сетевые сбои; ответы 4xx/5xx не повторяются
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, max=4),
        retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
        reraise=True,
    )
    def _generate(self, body: dict) -> dict:
        client = self._get_client()
        response = client.post(
            f"/models/{self.model}:generateContent",
            params={"key": self.api_key},
            json=body,
        )
        response.raise_for_status()
        return response.json()

    def extract(self, image: bytes, mime_type: str) -> dict[str, Any]:
        if not self.api_key:
            raise ExtractionError("GOOGLE_API_KEY is not configured")

        body = {
            "contents": [{
                "parts": [
                    {"text": EXTRACTION_PROMPT},
                    {"inline_data": {"mime_type": mime_type, "data": base64.b64encode(image).decode("ascii")}},
                ]
            }]
        }

        try:
            result = self._generate(body)
        except httpx.HTTPStatusError as e:
            logger.error(f"Gemini API error {e.response.status_code}: {e.response.text}")
            raise ExtractionError("Failed to analyze image")
        except httpx.HTTPError as e:
            logger.error(f"Gemini request failed: {e}")
            raise ExtractionError("Failed to analyze image")

        try:
            text = result["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            logger.error("Unexpected Gemini response shape: %s", str(result)[:500])
            raise ExtractionError("No valid JSON found in the response")

        return parse_model_output(text)
