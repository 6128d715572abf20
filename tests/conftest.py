"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Any

import pytest


@pytest.fixture
def base_url() -> str:
    """Base URL of the mocked docling-serve instance."""
    return "http://docling.test:5001"


@pytest.fixture
def api_key() -> str:
    """API key for test clients."""
    return "test-api-key"


@pytest.fixture
def convert_document_json() -> dict[str, Any]:
    """Sample in-body conversion result."""
    return {
        "document": {
            "filename": "2408.09869v5.pdf",
            "md_content": "# Docling Technical Report",
            "json_content": None,
            "html_content": None,
            "text_content": None,
            "doctags_content": None,
        },
        "status": "success",
        "errors": [],
        "processing_time": 3.2,
        "timings": {},
    }


@pytest.fixture
def chunk_document_json() -> dict[str, Any]:
    """Sample chunking result."""
    return {
        "chunks": [
            {
                "filename": "report.pdf",
                "chunk_index": 0,
                "text": "Docling Technical Report",
                "num_tokens": 4,
                "headings": ["Docling Technical Report"],
                "doc_items": ["#/texts/0"],
                "page_numbers": [1],
            },
            {
                "filename": "report.pdf",
                "chunk_index": 1,
                "text": "This technical report introduces Docling.",
                "num_tokens": 7,
                "headings": ["Abstract"],
                "doc_items": ["#/texts/2"],
                "page_numbers": [1],
            },
        ],
        "documents": [],
        "processing_time": 1.5,
    }


@pytest.fixture
def task_json() -> dict[str, Any]:
    """Sample task status for a freshly submitted task."""
    return {
        "task_id": "3f6d1c2e-8a41-4b1e-9a5f-2c0a7e5d9b10",
        "task_type": "convert",
        "task_status": "pending",
        "task_position": 1,
        "task_meta": None,
    }
