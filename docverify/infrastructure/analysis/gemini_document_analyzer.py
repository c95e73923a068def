"""
Gemini Document Analyzer: field extraction via google-genai.

Sends the document (by its signed read URL) to Gemini together with
an extraction profile chosen by document type, and normalizes the
JSON answer into an AnalysisOutcome. Remote failures never raise;
they come back as success=False.
"""

import json
import logging
import math
import mimetypes
import time
from urllib.parse import urlparse

from google import genai
from google.genai import types

from docverify.core.entities.analysis_result import AnalysisOutcome, ExtractedField
from docverify.core.entities.document import DocumentType
from docverify.core.interfaces.document_analyzer import GENERIC_MODEL_ID, IDocumentAnalyzer, select_model
from docverify.core.result import Result

logger = logging.getLogger(__name__)


# model_id -> fields the extraction should look for
PROFILE_FIELDS: dict[str, list[str]] = {
    "prebuilt-idDocument": [
        "fullName", "documentNumber", "dateOfBirth", "dateOfExpiration",
        "nationality", "issuingAuthority",
    ],
    "prebuilt-layout": ["fullName", "address", "city", "postalCode", "issueDate", "issuer"],
    "prebuilt-read": ["fullName", "documentNumber", "issueDate", "issuer", "result"],
    GENERIC_MODEL_ID: [],
}

SYSTEM_PROMPT = """You are a document field-extraction service. You read scanned documents and return structured fields.

IMPORTANT: Respond ONLY with a JSON object, no markdown, no backticks, no extra text.

Output JSON format:
{
    "fields": [
        {"name": "fieldName", "value": "extracted text", "confidence": 0.0 to 1.0}
    ],
    "summary": "One or two sentences describing the document"
}

Rules:
- Only include fields you can actually read in the document
- confidence reflects how legible and unambiguous the value is
- If nothing can be read, return an empty "fields" list
"""


def _strip_code_fence(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("```"):
        lines = raw.split("\n")
        raw = "\n".join(lines[1:])
        if raw.rstrip().endswith("```"):
            raw = raw.rstrip()[:-3]
        raw = raw.strip()
    return raw


def _guess_mime_type(document_url: str) -> str:
    mime, _ = mimetypes.guess_type(urlparse(document_url).path)
    return mime or "application/pdf"


class GeminiDocumentAnalyzer(IDocumentAnalyzer):
    """Gemini-powered OCR / field extraction."""

    def __init__(self, api_key: str = "", model_name: str = "gemini-2.0-flash", client=None):
        self.api_key = api_key
        self.model_name = model_name
        self._client = client

    def _get_client(self):
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def analyze(self, document_url: str, document_type: DocumentType | str) -> Result[AnalysisOutcome]:
        if not document_url or not document_url.strip():
            return Result.bad_request("Document URL is required")
        if document_type is None or (isinstance(document_type, str) and not document_type.strip()):
            return Result.bad_request("Document type is required")

        model_id = select_model(document_type)
        t0 = time.perf_counter()

        try:
            response = await self._get_client().aio.models.generate_content(
                model=self.model_name,
                contents=[
                    types.Part.from_uri(file_uri=document_url, mime_type=_guess_mime_type(document_url)),
                    SYSTEM_PROMPT + "\n\n" + self._build_prompt(model_id),
                ],
                config={
                    "temperature": 0.0,
                    "max_output_tokens": 2048,
                },
            )
            data = json.loads(_strip_code_fence(response.text or ""))
            outcome = AnalysisOutcome.from_fields(
                self._parse_fields(data),
                raw_summary=str(data.get("summary", "")),
                model_id=model_id,
            )
        except json.JSONDecodeError as e:
            logger.warning(f"Analysis returned invalid JSON: model={model_id}, error={e}")
            return Result.ok(AnalysisOutcome.failed(f"Invalid analysis response: {e}", model_id))
        except Exception as e:
            logger.warning(f"Analysis call failed: model={model_id}, error={e}")
            return Result.ok(AnalysisOutcome.failed(f"Analysis service error: {e}", model_id))

        latency = (time.perf_counter() - t0) * 1000
        logger.info(
            f"Analysis done: model={model_id}, fields={len(outcome.extracted_fields)}, "
            f"confidence={outcome.confidence}, latency_ms={latency:.1f}"
        )
        return Result.ok(outcome)

    def _build_prompt(self, model_id: str) -> str:
        expected = PROFILE_FIELDS.get(model_id, [])
        parts = [f"Extraction profile: {model_id}"]
        if expected:
            parts.append("Extract these fields when present:")
            parts.extend(f"  - {name}" for name in expected)
        else:
            parts.append("Extract every labelled key/value pair you can find.")
        return "\n".join(parts)

    @staticmethod
    def _parse_fields(data: dict) -> list[ExtractedField]:
        fields = []
        for item in data.get("fields") or []:
            if not isinstance(item, dict) or not item.get("name"):
                continue
            try:
                confidence = float(item.get("confidence", 0.0))
            except (TypeError, ValueError):
                confidence = 0.0
            if not math.isfinite(confidence):
                confidence = 0.0
            fields.append(ExtractedField(
                name=str(item["name"]),
                value="" if item.get("value") is None else str(item["value"]),
                confidence=confidence,
            ))
        return fields
