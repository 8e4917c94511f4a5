"""
Pytest configuration and fixtures for invoice-harvester tests

This module provides shared fixtures for unit and integration tests.
"""
from typing import Callable

import pytest

from invoice_harvester.core.models import Record, Schema, UploadedFile, default_schema
from invoice_harvester.editor import TabularEditor
from invoice_harvester.store import RecordTracker, TemplateStore


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that exercise a single component"
    )
    config.addinivalue_line(
        "markers", "integration: Tests wiring several components together"
    )


# =======================
# STATE FIXTURES
# =======================

@pytest.fixture
def schema() -> Schema:
    """The built-in invoice schema"""
    return default_schema()


@pytest.fixture
def tracker() -> RecordTracker:
    """Empty record tracker"""
    return RecordTracker()


@pytest.fixture
def template_store() -> TemplateStore:
    """Template store holding the seed templates"""
    return TemplateStore()


@pytest.fixture
def make_record(tracker) -> Callable[..., Record]:
    """
    Factory enqueueing a record and driving it to the requested status

    Usage:
        record = make_record("invoice1.pdf", status="processed", values={...})
    """

    def _make(
        file_name: str = "invoice1.pdf",
        status: str = "processed",
        values: dict | None = None,
        message: str | None = None,
        active_template_name: str | None = None,
        source_url: str | None = None,
    ) -> Record:
        record = tracker.enqueue(
            UploadedFile(file_name=file_name, source_url=source_url),
            active_template_name=active_template_name,
        )
        path = {
            "pending": [],
            "uploading": ["uploading"],
            "processing": ["uploading", "processing"],
            "processed": ["uploading", "processing", "processed"],
            "needs_validation": ["uploading", "processing", "needs_validation"],
            "error": ["uploading", "processing", "error"],
        }[status]
        for step in path:
            if step in ("processed", "needs_validation"):
                tracker.advance(record.id, step, values or {}, message=message)
            elif step == "error":
                tracker.advance(record.id, step, message or "Extraction failed")
            else:
                tracker.advance(record.id, step)
        return tracker.get(record.id)

    return _make


@pytest.fixture
def acme_values() -> dict:
    """Extracted values of a small processed invoice"""
    return {
        "supplier": "Acme Ltd",
        "total_price": 42.5,
        "currency": "EUR",
        "products": [{"name": "Widget", "quantity": 2, "price": 10}],
    }


@pytest.fixture
def editor(tracker, schema, template_store) -> TabularEditor:
    """Editor over the tracker with upload-template lookup and deletion wired"""
    return TabularEditor(
        tracker,
        schema,
        template_lookup=lambda name: template_store.find_by_name(name, for_upload=True),
        on_delete=tracker.remove,
    )
