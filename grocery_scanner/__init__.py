"""Grocery receipt scanning: vision-model extraction and spending analytics."""

from .analytics import CategorySpending, SpendingSummary, summarize_spending
from .config import ScannerConfig, VisionConfig, load_config
from .db import ReceiptStore
from .errors import ConfigurationError, ExternalServiceError
from .models import CATEGORIES, LineItem, ReceiptExtraction
from .parser import parse
from .pipeline import ExtractOptions, extract_and_parse
from .vision import VisionBackend, create_backend

__all__ = [
    "CATEGORIES",
    "LineItem",
    "ReceiptExtraction",
    "parse",
    "ExtractOptions",
    "extract_and_parse",
    "VisionBackend",
    "create_backend",
    "ConfigurationError",
    "ExternalServiceError",
    "ScannerConfig",
    "VisionConfig",
    "load_config",
    "ReceiptStore",
    "CategorySpending",
    "SpendingSummary",
    "summarize_spending",
]
