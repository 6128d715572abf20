"""Pydantic models for docling-serve API requests and responses.

Only the fields the client needs to know about are declared; everything
else the service sends is kept as extra data, since the schemas are owned
by the service and evolve independently of this client.
"""

from __future__ import annotations

import base64
from enum import StrEnum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


__all__ = [
    "ChunkDocumentResponse",
    "ChunkedDocumentResultItem",
    "ClearResponse",
    "ConvertDocumentResponse",
    "ConvertDocumentsRequest",
    "ConvertDocumentsRequestOptions",
    "ConvertFileSettings",
    "ConvertResult",
    "ErrorItem",
    "ExportDocumentResponse",
    "FileSourceRequest",
    "HealthCheckResponse",
    "HierarchicalChunkFileSettings",
    "HierarchicalChunkerOptions",
    "HierarchicalChunkerOptionsDocumentsRequest",
    "HttpSourceRequest",
    "HybridChunkFileSettings",
    "HybridChunkerOptions",
    "HybridChunkerOptionsDocumentsRequest",
    "InBodyTarget",
    "PresignedUrlConvertDocumentResponse",
    "ResultResponse",
    "TaskProcessingMeta",
    "TaskStatus",
    "TaskStatusResponse",
    "ZipTarget",
    "parse_convert_result",
    "parse_result_response",
]


class TaskStatus(StrEnum):
    """Lifecycle states of an asynchronous docling-serve task."""

    PENDING = "pending"
    STARTED = "started"
    SUCCESS = "success"
    FAILURE = "failure"


class DoclingBaseModel(BaseModel):
    """Base model with common configuration for all docling-serve models."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",  # Keep fields this client does not model
    )


# ---------------------------------------------------------------------------
# Service status
# ---------------------------------------------------------------------------


class HealthCheckResponse(DoclingBaseModel):
    """Response of the health endpoint."""

    status: str = "ok"


class ClearResponse(DoclingBaseModel):
    """Response of the maintenance clear endpoints."""

    status: str = "ok"


class TaskProcessingMeta(DoclingBaseModel):
    """Progress counters reported while a task runs."""

    num_docs: int = 0
    num_processed: int = 0
    num_succeeded: int = 0
    num_failed: int = 0


class TaskStatusResponse(DoclingBaseModel):
    """Status of an asynchronous task.

    Returned both by the async submission endpoints (the task handle) and by
    the poll endpoint.
    """

    task_id: str
    task_type: str | None = None
    task_status: TaskStatus | str = TaskStatus.PENDING
    task_position: int | None = None
    task_meta: TaskProcessingMeta | None = None

    @property
    def is_terminal(self) -> bool:
        """Whether the task finished, successfully or not."""
        return self.task_status in {TaskStatus.SUCCESS, TaskStatus.FAILURE}


# ---------------------------------------------------------------------------
# Conversion requests
# ---------------------------------------------------------------------------


class ConvertDocumentsRequestOptions(DoclingBaseModel):
    """Conversion options. Unset options use the service defaults."""

    from_formats: list[str] | None = None
    to_formats: list[str] | None = None
    image_export_mode: str | None = None
    do_ocr: bool | None = None
    force_ocr: bool | None = None
    ocr_engine: str | None = None
    ocr_lang: list[str] | None = None
    pdf_backend: str | None = None
    table_mode: str | None = None
    abort_on_error: bool | None = None
    do_table_structure: bool | None = None
    include_images: bool | None = None
    images_scale: float | None = None
    page_range: tuple[int, int] | None = None
    document_timeout: float | None = None


class HttpSourceRequest(DoclingBaseModel):
    """A document fetched by the service from a URL."""

    kind: Literal["http"] = "http"
    url: str
    headers: dict[str, Any] = Field(default_factory=dict)


class FileSourceRequest(DoclingBaseModel):
    """A document sent inline as base64."""

    kind: Literal["file"] = "file"
    base64_string: str
    filename: str

    @classmethod
    def from_bytes(cls, content: bytes, filename: str) -> FileSourceRequest:
        """Build a source from raw document bytes."""
        return cls(
            base64_string=base64.b64encode(content).decode("ascii"),
            filename=filename,
        )

    @classmethod
    def from_path(cls, path: Path) -> FileSourceRequest:
        """Build a source from a local file."""
        return cls.from_bytes(path.read_bytes(), path.name)


class InBodyTarget(DoclingBaseModel):
    """Return results in the response body."""

    kind: Literal["inbody"] = "inbody"


class ZipTarget(DoclingBaseModel):
    """Return results as a ZIP archive."""

    kind: Literal["zip"] = "zip"


class ConvertDocumentsRequest(DoclingBaseModel):
    """Body of the convert-from-source endpoints."""

    sources: list[HttpSourceRequest | FileSourceRequest]
    options: ConvertDocumentsRequestOptions = Field(
        default_factory=ConvertDocumentsRequestOptions
    )
    target: InBodyTarget | ZipTarget = Field(default_factory=InBodyTarget)


# ---------------------------------------------------------------------------
# Conversion responses
# ---------------------------------------------------------------------------


class ExportDocumentResponse(DoclingBaseModel):
    """A converted document in the requested output formats."""

    filename: str
    md_content: str | None = None
    json_content: dict[str, Any] | None = None
    html_content: str | None = None
    text_content: str | None = None
    doctags_content: str | None = None


class ErrorItem(DoclingBaseModel):
    """An error reported by one conversion pipeline component."""

    component_type: str
    module_name: str
    error_message: str


class ConvertDocumentResponse(DoclingBaseModel):
    """Result of converting a single document in the response body."""

    document: ExportDocumentResponse
    status: str
    errors: list[ErrorItem] = Field(default_factory=list)
    processing_time: float = 0.0
    timings: dict[str, Any] = Field(default_factory=dict)


class PresignedUrlConvertDocumentResponse(DoclingBaseModel):
    """Result summary when outputs were uploaded to a remote target."""

    processing_time: float = 0.0
    num_converted: int = 0
    num_succeeded: int = 0
    num_failed: int = 0


type ConvertResult = ConvertDocumentResponse | PresignedUrlConvertDocumentResponse


# ---------------------------------------------------------------------------
# Chunking
# ---------------------------------------------------------------------------


class HybridChunkerOptions(DoclingBaseModel):
    """Options of the tokenizer-aware hybrid chunker."""

    chunker: Literal["hybrid"] = "hybrid"
    use_markdown_tables: bool | None = None
    include_raw_text: bool | None = None
    max_tokens: int | None = None
    tokenizer: str | None = None
    merge_peers: bool | None = None


class HierarchicalChunkerOptions(DoclingBaseModel):
    """Options of the document-structure hierarchical chunker."""

    chunker: Literal["hierarchical"] = "hierarchical"
    use_markdown_tables: bool | None = None
    include_raw_text: bool | None = None


class HybridChunkerOptionsDocumentsRequest(DoclingBaseModel):
    """Body of the hybrid chunk-from-source endpoints."""

    sources: list[HttpSourceRequest | FileSourceRequest]
    convert_options: ConvertDocumentsRequestOptions = Field(
        default_factory=ConvertDocumentsRequestOptions
    )
    target: InBodyTarget | ZipTarget = Field(default_factory=InBodyTarget)
    include_converted_doc: bool = False
    chunking_options: HybridChunkerOptions = Field(
        default_factory=HybridChunkerOptions
    )


class HierarchicalChunkerOptionsDocumentsRequest(DoclingBaseModel):
    """Body of the hierarchical chunk-from-source endpoints."""

    sources: list[HttpSourceRequest | FileSourceRequest]
    convert_options: ConvertDocumentsRequestOptions = Field(
        default_factory=ConvertDocumentsRequestOptions
    )
    target: InBodyTarget | ZipTarget = Field(default_factory=InBodyTarget)
    include_converted_doc: bool = False
    chunking_options: HierarchicalChunkerOptions = Field(
        default_factory=HierarchicalChunkerOptions
    )


class ChunkedDocumentResultItem(DoclingBaseModel):
    """One chunk of a chunked document."""

    filename: str
    chunk_index: int
    text: str
    raw_text: str | None = None
    num_tokens: int | None = None
    headings: list[str] | None = None
    captions: list[str] | None = None
    doc_items: list[str] = Field(default_factory=list)
    page_numbers: list[int] | None = None
    metadata: dict[str, Any] | None = None


class ChunkDocumentResponse(DoclingBaseModel):
    """Result of a chunking request."""

    chunks: list[ChunkedDocumentResultItem]
    documents: list[dict[str, Any]] = Field(default_factory=list)
    processing_time: float = 0.0


type ResultResponse = ConvertResult | ChunkDocumentResponse


# ---------------------------------------------------------------------------
# Multipart settings for the file endpoints
# ---------------------------------------------------------------------------


class ConvertFileSettings(ConvertDocumentsRequestOptions):
    """Form settings sent alongside files to the convert-file endpoints."""

    target_type: Literal["inbody", "zip"] | None = None


class HybridChunkFileSettings(DoclingBaseModel):
    """Form settings sent alongside files to the hybrid chunk-file endpoints.

    Conversion options use the ``convert_`` prefix and chunker options the
    ``chunking_`` prefix, as flat form fields.
    """

    convert_from_formats: list[str] | None = None
    convert_to_formats: list[str] | None = None
    convert_do_ocr: bool | None = None
    convert_force_ocr: bool | None = None
    convert_ocr_engine: str | None = None
    convert_ocr_lang: list[str] | None = None
    convert_pdf_backend: str | None = None
    convert_table_mode: str | None = None
    target_type: Literal["inbody", "zip"] | None = None
    include_converted_doc: bool | None = None
    chunking_use_markdown_tables: bool | None = None
    chunking_include_raw_text: bool | None = None
    chunking_max_tokens: int | None = None
    chunking_tokenizer: str | None = None
    chunking_merge_peers: bool | None = None


class HierarchicalChunkFileSettings(DoclingBaseModel):
    """Form settings sent alongside files to the hierarchical chunk-file endpoints."""

    convert_from_formats: list[str] | None = None
    convert_to_formats: list[str] | None = None
    convert_do_ocr: bool | None = None
    convert_force_ocr: bool | None = None
    convert_ocr_engine: str | None = None
    convert_ocr_lang: list[str] | None = None
    convert_pdf_backend: str | None = None
    convert_table_mode: str | None = None
    target_type: Literal["inbody", "zip"] | None = None
    include_converted_doc: bool | None = None
    chunking_use_markdown_tables: bool | None = None
    chunking_include_raw_text: bool | None = None


def parse_convert_result(data: dict[str, Any]) -> ConvertResult:
    """Validate a conversion result into its concrete model."""
    if "document" in data:
        return ConvertDocumentResponse.model_validate(data)
    return PresignedUrlConvertDocumentResponse.model_validate(data)


def parse_result_response(data: dict[str, Any]) -> ResultResponse:
    """Validate a task result, which is either a conversion or a chunking result."""
    if "chunks" in data:
        return ChunkDocumentResponse.model_validate(data)
    return parse_convert_result(data)
