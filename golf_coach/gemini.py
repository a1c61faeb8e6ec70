import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from .config import DEFAULT_BASE_URL, DEFAULT_MODEL
from .prompt import PromptSpec
from .schemas import AnalysisResult

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    """Base class for failures of the external analysis call."""


class ServiceFailure(AnalysisError):
    """The Gemini call failed at the transport or service level."""


class MalformedResponse(AnalysisError):
    """Gemini answered, but not with the JSON shape we asked for."""


class AnalysisClient:
    """Sends one PromptSpec to Gemini's generateContent endpoint per call.

    There is no retry and no timeout: a call runs until the underlying
    transport resolves or fails.  ``transport`` lets tests swap in an
    ``httpx.MockTransport``.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._transport = transport
        self.model = model
        self.url = f"{base_url}/models/{model}:generateContent"

    def build_payload(self, spec: PromptSpec) -> dict:
        return {
            "systemInstruction": {"parts": [{"text": spec.system_instruction}]},
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": spec.user_message}],
                }
            ],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": spec.response_schema,
            },
        }

    async def analyze(self, spec: PromptSpec) -> AnalysisResult:
        payload = self.build_payload(spec)

        try:
            async with httpx.AsyncClient(
                timeout=None, transport=self._transport
            ) as client:
                response = await client.post(
                    self.url,
                    headers={"x-goog-api-key": self._api_key},
                    json=payload,
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            # Surface the actual Gemini API error message
            try:
                detail = exc.response.json()
                msg = detail.get("error", {}).get("message", exc.response.reason_phrase)
            except (ValueError, AttributeError):
                msg = exc.response.reason_phrase
            raise ServiceFailure(
                f"Gemini API error ({exc.response.status_code}): {msg}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ServiceFailure(
                f"Gemini request failed: {type(exc).__name__}"
            ) from exc

        try:
            data = response.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise MalformedResponse(f"Unexpected response from Gemini API: {exc!r}") from exc
        if not isinstance(text, str):
            raise MalformedResponse("Gemini candidate text is not a string")

        try:
            result = AnalysisResult.model_validate_json(text)
        except ValidationError as exc:
            raise MalformedResponse(
                f"Gemini response did not match the expected shape: {exc}"
            ) from exc

        logger.info("Gemini (%s) classified golfer as %r", self.model, result.level)
        return result
