"""Image → vision backend → parser pipeline."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from .config import load_config
from .errors import ConfigurationError, ExternalServiceError
from .models import ReceiptExtraction, placeholder_extraction
from .parser import parse
from .vision import VisionBackend, create_backend

logger = logging.getLogger(__name__)


@dataclass
class ExtractOptions:
    """Per-call options for ``extract_and_parse``.

    Attributes:
        allow_placeholder_on_quota_error: Return canned demo data instead
            of raising when the provider reports an exhausted quota.
        timeout_ms: Upper bound on the provider call.
    """

    allow_placeholder_on_quota_error: bool = False
    timeout_ms: int = 30000


async def extract_and_parse(
    image: bytes,
    credential: str,
    options: ExtractOptions | None = None,
    *,
    backend: VisionBackend | None = None,
    mime_type: str = "image/jpeg",
) -> ReceiptExtraction:
    """Read one receipt image and return its structured extraction.

    The result may have no transactions; that means nothing was
    recognized and is not an error. When no ``backend`` is given, the
    default configuration selects one.

    Raises:
        ConfigurationError: If ``credential`` is empty or ``timeout_ms``
            is not positive.
        ExternalServiceError: If the provider call fails or times out.
    """
    options = options or ExtractOptions()
    if not credential or not credential.strip():
        raise ConfigurationError("An API key is required to process receipts.")
    if options.timeout_ms <= 0:
        raise ConfigurationError(
            f"timeout_ms must be positive, got {options.timeout_ms}"
        )
    if backend is None:
        backend = create_backend(load_config())

    logger.info(
        "Processing receipt with %s backend (%d bytes, key length %d)",
        backend.name,
        len(image),
        len(credential),
    )
    try:
        raw_text = await asyncio.wait_for(
            backend.extract(image, credential, mime_type=mime_type),
            timeout=options.timeout_ms / 1000,
        )
    except asyncio.TimeoutError:
        raise ExternalServiceError(
            f"{backend.name} request timed out after {options.timeout_ms} ms",
            provider=backend.name,
        ) from None
    except ExternalServiceError as e:
        if e.quota_exhausted and options.allow_placeholder_on_quota_error:
            logger.warning(
                "%s quota exhausted; returning placeholder extraction", backend.name
            )
            return placeholder_extraction()
        raise

    extraction = parse(raw_text)
    if not extraction.transactions:
        logger.info("No transactions recognized in %s response", backend.name)
    else:
        logger.info("Extracted %d transactions", len(extraction.transactions))
    return extraction
