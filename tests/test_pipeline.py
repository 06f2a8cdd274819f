"""Tests for the extract-and-parse pipeline."""

import asyncio
from unittest.mock import patch

import pytest

from grocery_scanner.errors import ConfigurationError, ExternalServiceError
from grocery_scanner.models import PLACEHOLDER_EXTRACTION
from grocery_scanner.pipeline import ExtractOptions, extract_and_parse
from grocery_scanner.vision import VisionBackend
from grocery_scanner.vision.openai_chat import OpenAIVisionBackend


class StubBackend(VisionBackend):
    """Backend returning canned text or raising a canned error."""

    name = "stub"

    def __init__(self, text: str = "", error: Exception | None = None, delay: float = 0):
        self.text = text
        self.error = error
        self.delay = delay
        self.calls: list[tuple[bytes, str, str]] = []
        self.cancelled = False

    async def extract(self, image, credential, *, mime_type="image/jpeg"):
        self.calls.append((image, credential, mime_type))
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if self.error is not None:
            raise self.error
        return self.text


def _quota_error() -> ExternalServiceError:
    return ExternalServiceError(
        "quota exceeded", provider="stub", status=429, quota_exhausted=True
    )


class TestExtractAndParse:
    @pytest.mark.asyncio
    async def test_heuristic_result(self):
        backend = StubBackend("SuperMart\nMilk 65\nBread 35\nTotal 100")
        result = await extract_and_parse(b"img", "key", backend=backend)

        assert result.store_name == "SuperMart"
        assert result.total_amount == 100
        assert [t.item_name for t in result.transactions] == ["Milk", "Bread"]
        assert result.placeholder is False
        assert backend.calls == [(b"img", "key", "image/jpeg")]

    @pytest.mark.asyncio
    async def test_mime_type_passed_through(self):
        backend = StubBackend('{"transactions": []}')
        result = await extract_and_parse(
            b"img", "key", backend=backend, mime_type="image/png"
        )
        assert result.transactions == []
        assert backend.calls[0][2] == "image/png"

    @pytest.mark.asyncio
    async def test_missing_credential_fails_before_call(self):
        backend = StubBackend("Milk 65")
        with pytest.raises(ConfigurationError):
            await extract_and_parse(b"img", "", backend=backend)
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_invalid_timeout(self):
        backend = StubBackend("Milk 65")
        with pytest.raises(ConfigurationError, match="timeout_ms"):
            await extract_and_parse(
                b"img", "key", ExtractOptions(timeout_ms=0), backend=backend
            )

    @pytest.mark.asyncio
    async def test_error_propagates(self):
        backend = StubBackend(error=ExternalServiceError("boom", provider="stub", status=500))
        with pytest.raises(ExternalServiceError, match="boom"):
            await extract_and_parse(
                b"img",
                "key",
                ExtractOptions(allow_placeholder_on_quota_error=True),
                backend=backend,
            )


class TestQuotaDegrade:
    @pytest.mark.asyncio
    async def test_placeholder_when_allowed(self):
        backend = StubBackend(error=_quota_error())
        result = await extract_and_parse(
            b"img",
            "key",
            ExtractOptions(allow_placeholder_on_quota_error=True),
            backend=backend,
        )
        assert result.placeholder is True
        assert result.to_dict() == PLACEHOLDER_EXTRACTION.to_dict()
        assert len(result.transactions) > 0

    @pytest.mark.asyncio
    async def test_raises_when_not_allowed(self):
        backend = StubBackend(error=_quota_error())
        with pytest.raises(ExternalServiceError) as exc:
            await extract_and_parse(b"img", "key", backend=backend)
        assert exc.value.quota_exhausted is True

    @pytest.mark.asyncio
    async def test_placeholder_is_a_fresh_copy(self):
        backend = StubBackend(error=_quota_error())
        options = ExtractOptions(allow_placeholder_on_quota_error=True)
        first = await extract_and_parse(b"img", "key", options, backend=backend)
        first.transactions.clear()
        second = await extract_and_parse(b"img", "key", options, backend=backend)
        assert len(second.transactions) == len(PLACEHOLDER_EXTRACTION.transactions)


class TestTimeout:
    @pytest.mark.asyncio
    async def test_timeout_raises_and_cancels(self):
        backend = StubBackend("Milk 65", delay=5)
        with pytest.raises(ExternalServiceError, match="timed out after 50 ms"):
            await extract_and_parse(
                b"img", "key", ExtractOptions(timeout_ms=50), backend=backend
            )
        assert backend.cancelled is True


class TestDefaultBackend:
    @pytest.mark.asyncio
    async def test_backend_from_default_config(self):
        backend = StubBackend("Milk 65")
        with patch(
            "grocery_scanner.pipeline.create_backend", return_value=backend
        ) as mock_create:
            result = await extract_and_parse(b"img", "key")

        config = mock_create.call_args.args[0]
        assert config.vision.backend == "openai"
        assert [t.item_name for t in result.transactions] == ["Milk"]
        assert backend.calls == [(b"img", "key", "image/jpeg")]

    @pytest.mark.asyncio
    async def test_default_backend_is_openai(self):
        captured = []

        async def fake_extract(self, image, credential, *, mime_type="image/jpeg"):
            captured.append(self)
            return '{"transactions": []}'

        with patch.object(OpenAIVisionBackend, "extract", fake_extract):
            result = await extract_and_parse(b"img", "key", ExtractOptions())

        assert result.transactions == []
        assert isinstance(captured[0], OpenAIVisionBackend)
