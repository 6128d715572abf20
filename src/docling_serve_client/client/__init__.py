"""docling-serve API client module.

This module provides an async HTTP client for the docling-serve REST API:
document conversion and chunking from sources or uploaded files, background
task submission and polling, and service maintenance.

Example:
    ```python
    from pathlib import Path

    from docling_serve_client.client import (
        ConvertFileSettings,
        DoclingServeClient,
        ResponseType,
    )

    async with DoclingServeClient(
        base_url="http://docling:5001",
        api_key="your-api-key",
    ) as client:
        result = await client.convert_from_file(
            Path("report.pdf"),
            settings=ConvertFileSettings(to_formats=["md"], do_ocr=False),
        )
        print(result.document.md_content)

        # The same conversion, returned as a zip archive
        archive = await client.convert_from_file(
            Path("report.pdf"),
            response_type=ResponseType.ZIP,
        )
        Path(archive.filename or "result.zip").write_bytes(archive.content)
    ```
"""

from __future__ import annotations

from docling_serve_client.client.body import (
    BinaryBody,
    BinaryViewBody,
    MultipartBody,
    StreamBody,
    TextBody,
    UrlEncodedBody,
    WireBody,
)
from docling_serve_client.client.client import (
    DoclingServeClient,
    ResponseType,
    create_docling_serve_client,
    resolve_url,
)
from docling_serve_client.client.exceptions import (
    DoclingError,
    DoclingServeClientError,
    InvalidInputError,
)
from docling_serve_client.client.models import (
    ChunkDocumentResponse,
    ChunkedDocumentResultItem,
    ClearResponse,
    ConvertDocumentResponse,
    ConvertDocumentsRequest,
    ConvertDocumentsRequestOptions,
    ConvertFileSettings,
    ConvertResult,
    ErrorItem,
    ExportDocumentResponse,
    FileSourceRequest,
    HealthCheckResponse,
    HierarchicalChunkerOptions,
    HierarchicalChunkerOptionsDocumentsRequest,
    HierarchicalChunkFileSettings,
    HttpSourceRequest,
    HybridChunkerOptions,
    HybridChunkerOptionsDocumentsRequest,
    HybridChunkFileSettings,
    InBodyTarget,
    PresignedUrlConvertDocumentResponse,
    ResultResponse,
    TaskProcessingMeta,
    TaskStatus,
    TaskStatusResponse,
    ZipTarget,
)
from docling_serve_client.client.multipart import (
    FileDescriptor,
    create_multipart_body,
)
from docling_serve_client.client.responses import (
    BinaryResult,
    BlobResult,
    ResponseMode,
)


__all__ = [
    "BinaryBody",
    "BinaryResult",
    "BinaryViewBody",
    "BlobResult",
    "ChunkDocumentResponse",
    "ChunkedDocumentResultItem",
    "ClearResponse",
    "ConvertDocumentResponse",
    "ConvertDocumentsRequest",
    "ConvertDocumentsRequestOptions",
    "ConvertFileSettings",
    "ConvertResult",
    "DoclingError",
    "DoclingServeClient",
    "DoclingServeClientError",
    "ErrorItem",
    "ExportDocumentResponse",
    "FileDescriptor",
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
    "InvalidInputError",
    "MultipartBody",
    "PresignedUrlConvertDocumentResponse",
    "ResponseMode",
    "ResponseType",
    "ResultResponse",
    "StreamBody",
    "TaskProcessingMeta",
    "TaskStatus",
    "TaskStatusResponse",
    "TextBody",
    "UrlEncodedBody",
    "WireBody",
    "ZipTarget",
    "create_docling_serve_client",
    "create_multipart_body",
    "resolve_url",
]
