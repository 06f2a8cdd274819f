"""Claude API vision backend."""

from __future__ import annotations

import base64
import logging

from ..errors import ExternalServiceError
from . import EXTRACTION_PROMPT, PAYMENT_REQUIRED, VisionBackend

logger = logging.getLogger(__name__)


class ClaudeVisionBackend(VisionBackend):
    """Read receipts using Claude's vision capability."""

    name = "claude"

    def __init__(
        self,
        model: str = "claude-sonnet-4-5-20250929",
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
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install anthropic"
            ) from None

        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": mime_type,
                    "data": base64.standard_b64encode(image).decode(),
                },
            },
            {"type": "text", "text": EXTRACTION_PROMPT},
        ]

        client = anthropic.AsyncAnthropic(
            api_key=credential, timeout=self._timeout, max_retries=0
        )
        logger.debug(
            "Sending %d byte image to Claude model %s", len(image), self._model
        )
        try:
            response = await client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=0,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.APIStatusError as e:
            raise ExternalServiceError(
                f"Claude API error: {e.message or 'Unknown error'}",
                provider=self.name,
                status=e.status_code,
                quota_exhausted=_is_quota_error(e),
            ) from e
        except anthropic.APIError as e:
            raise ExternalServiceError(
                f"Claude API error: {e.message or 'Unknown error'}",
                provider=self.name,
            ) from e

        if not response.content:
            return ""
        return response.content[0].text


def _is_quota_error(error) -> bool:
    """True when the error body reports billing exhaustion.

    Rate limits (429, ``rate_limit_error``) and overload are transient
    and do not count.
    """
    if error.status_code == PAYMENT_REQUIRED:
        return True
    body = getattr(error, "body", None)
    if not isinstance(body, dict):
        return False
    detail = body.get("error")
    if isinstance(detail, dict):
        return detail.get("type") == "billing_error"
    return body.get("type") == "billing_error"
