"""OpenAI chat-completions vision backend."""

from __future__ import annotations

import base64
import logging

from ..errors import ExternalServiceError
from . import EXTRACTION_PROMPT, PAYMENT_REQUIRED, VisionBackend

logger = logging.getLogger(__name__)


class OpenAIVisionBackend(VisionBackend):
    """Read receipts with an OpenAI vision-capable chat model."""

    name = "openai"

    def __init__(
        self,
        model: str = "gpt-4o-mini",
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
            import openai
        except ImportError:
            raise ImportError(
                "openai SDK is required: pip install openai"
            ) from None

        data_url = f"data:{mime_type};base64,{base64.b64encode(image).decode()}"
        client = openai.AsyncOpenAI(
            api_key=credential, timeout=self._timeout, max_retries=0
        )
        logger.debug(
            "Sending %d byte image to OpenAI model %s", len(image), self._model
        )
        try:
            response = await client.chat.completions.create(
                model=self._model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": EXTRACTION_PROMPT},
                            {"type": "image_url", "image_url": {"url": data_url}},
                        ],
                    }
                ],
                max_tokens=self._max_tokens,
                temperature=0,
            )
        except openai.APIStatusError as e:
            raise ExternalServiceError(
                f"OpenAI API error: {e.message or 'Unknown error'}",
                provider=self.name,
                status=e.status_code,
                quota_exhausted=_is_quota_error(e),
            ) from e
        except openai.APIError as e:
            raise ExternalServiceError(
                f"OpenAI API error: {e.message or 'Unknown error'}",
                provider=self.name,
            ) from e

        if not response.choices:
            raise ExternalServiceError(
                "OpenAI API error: response contained no choices",
                provider=self.name,
            )
        return response.choices[0].message.content or ""


def _is_quota_error(error) -> bool:
    # Rate limits also use 429, with code "rate_limit_exceeded".
    if error.status_code == PAYMENT_REQUIRED:
        return True
    code = getattr(error, "code", None)
    if code is None and isinstance(getattr(error, "body", None), dict):
        code = error.body.get("code")
    return code == "insufficient_quota"
