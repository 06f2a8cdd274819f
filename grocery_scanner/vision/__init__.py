"""Vision backend base class, extraction prompt, and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..errors import ConfigurationError
from ..models import CATEGORIES

if TYPE_CHECKING:
    from ..config import ScannerConfig

EXTRACTION_PROMPT = f"""\
Analyze this grocery receipt image and extract all transactions. For each item, provide:
1. Item name
2. Quantity (if specified)
3. Unit price (if specified)
4. Total price for that item
5. Category (choose from: {', '.join(CATEGORIES)})
6. Confidence score (0-1)

Also extract:
- Store name
- Total amount
- Transaction date (if visible)

Return the data in this exact JSON format:
{{
  "store_name": "Store Name",
  "total_amount": 123.45,
  "transaction_date": "2024-01-15",
  "transactions": [
    {{
      "item_name": "Item Name",
      "quantity": 1,
      "unit_price": 10.00,
      "total_price": 10.00,
      "category": "Category Name",
      "confidence_score": 0.95
    }}
  ]
}}

Focus on Indian grocery stores and products. Amounts should be in Indian Rupees (₹).
"""

# Billing exhaustion. A bare 429 is a rate limit and is classified per provider.
PAYMENT_REQUIRED = 402


class VisionBackend(ABC):
    """Abstract base for reading receipt images with a vision model."""

    name: str = ""

    @abstractmethod
    async def extract(
        self, image: bytes, credential: str, *, mime_type: str = "image/jpeg"
    ) -> str:
        """Send one image to the provider and return its raw text reply.

        Raises:
            ConfigurationError: If ``credential`` is empty.
            ExternalServiceError: If the provider call fails.
        """
        ...

    def _require_credential(self, credential: str) -> None:
        if not credential or not credential.strip():
            raise ConfigurationError(
                f"No API key configured for the {self.name!r} vision backend. "
                "Set it in the config file or the provider's environment variable."
            )


def create_backend(config: ScannerConfig) -> VisionBackend:
    """Create a vision backend based on configuration."""
    vision = config.vision
    backend_name = vision.backend
    timeout = vision.timeout_ms / 1000

    match backend_name:
        case "openai":
            from .openai_chat import OpenAIVisionBackend

            return OpenAIVisionBackend(
                model=vision.openai.model,
                max_tokens=vision.max_tokens,
                timeout=timeout,
            )
        case "gemini":
            from .gemini import GeminiVisionBackend

            return GeminiVisionBackend(
                model=vision.gemini.model,
                max_tokens=vision.max_tokens,
                timeout=timeout,
            )
        case "claude":
            from .claude import ClaudeVisionBackend

            return ClaudeVisionBackend(
                model=vision.claude.model,
                max_tokens=vision.max_tokens,
                timeout=timeout,
            )
        case _:
            raise ConfigurationError(
                f"Unknown vision backend: {backend_name!r}  "
                f"(choose one of openai / gemini / claude)"
            )
