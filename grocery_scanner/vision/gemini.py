"""Gemini API vision backend."""

from __future__ import annotations

import logging

from ..errors import ExternalServiceError
from . import EXTRACTION_PROMPT, VisionBackend

logger = logging.getLogger(__name__)


class GeminiVisionBackend(VisionBackend):
    """Read receipts using Google Gemini's vision capability.

    ``genai.configure`` sets the key process-wide, so concurrent calls
    with different credentials should use separate processes.
    """

    name = "gemini"

    def __init__(
        self,
        model: str = "gemini-1.5-flash",
        max_tokens: int = 2000,
        timeout: float = 30.0,
    ) -> None:
        self._model = model
        self._max_tokens = max_tokens
        self._timeout = timeout

    async def extract(
        self, image: bytes, credential: str, *, mime_type: str = "image/jpeg"
    ) -> str:
        self._require_credential(credential)

        try:
            import google.generativeai as genai
            from google.api_core import exceptions as google_exceptions
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install google-generativeai"
            ) from None

        genai.configure(api_key=credential)
        model = genai.GenerativeModel(self._model)

        parts = [{"mime_type": mime_type, "data": image}, EXTRACTION_PROMPT]
        logger.debug(
            "Sending %d byte image to Gemini model %s", len(image), self._model
        )
        try:
            response = await model.generate_content_async(
                parts,
                generation_config={
                    "max_output_tokens": self._max_tokens,
                    "temperature": 0,
                },
                # Single attempt; api_core would otherwise retry on its default policy.
                request_options={"timeout": self._timeout, "retry": None},
            )
        except google_exceptions.ResourceExhausted as e:
            raise ExternalServiceError(
                f"Gemini API error: {e.message or 'Unknown error'}",
                provider=self.name,
                status=429,
                quota_exhausted=True,
            ) from e
        except google_exceptions.GoogleAPICallError as e:
            raise ExternalServiceError(
                f"Gemini API error: {e.message or 'Unknown error'}",
                provider=self.name,
                status=e.code,
            ) from e

        try:
            return response.text
        except ValueError as e:
            # Raised when the candidate was blocked or has no text parts.
            raise ExternalServiceError(
                f"Gemini API error: {e}", provider=self.name
            ) from e
