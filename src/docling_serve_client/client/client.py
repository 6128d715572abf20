"""Async HTTP client for the docling-serve API."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Self
from urllib.parse import quote, urljoin

import httpx
from pydantic import BaseModel

from docling_serve_client.client.body import JSON_CONTENT_TYPE, prepare_body
from docling_serve_client.client.models import (
    ChunkDocumentResponse,
    ClearResponse,
    ConvertDocumentsRequest,
    ConvertFileSettings,
    ConvertResult,
    HealthCheckResponse,
    HierarchicalChunkerOptionsDocumentsRequest,
    HierarchicalChunkFileSettings,
    HybridChunkerOptionsDocumentsRequest,
    HybridChunkFileSettings,
    ResultResponse,
    TaskStatusResponse,
    parse_convert_result,
    parse_result_response,
)
from docling_serve_client.client.multipart import FileInput, create_multipart_body
from docling_serve_client.client.responses import (
    BinaryResult,
    ResponseMode,
    decode_response,
    normalize_error,
)
from docling_serve_client.config.exceptions import ConfigurationError
from docling_serve_client.config.schema import ClientConfig
from docling_serve_client.observability.logging import generate_request_id, get_logger


if TYPE_CHECKING:
    from docling_serve_client.config.settings import Settings


__all__ = [
    "DoclingServeClient",
    "ResponseType",
    "create_docling_serve_client",
    "resolve_url",
]


ZIP_CONTENT_TYPE = "application/zip"
FILES_FIELD = "files"

_ABSOLUTE_URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)

type SourceRequest[T] = T | Mapping[str, Any]
type FileSettings[T] = T | Mapping[str, Any]


class ResponseType(StrEnum):
    """Representation requested from the synchronous endpoints.

    Attributes:
        JSON: Structured JSON, validated into the response models.
        ZIP: The results archive, returned as a ``BinaryResult``.
    """

    JSON = "json"
    ZIP = "zip"

    @property
    def mode(self) -> ResponseMode:
        """The response decoding mode for this representation."""
        return ResponseMode.BINARY if self is ResponseType.ZIP else ResponseMode.JSON

    @property
    def accept(self) -> str:
        """The default Accept header for this representation."""
        return ZIP_CONTENT_TYPE if self is ResponseType.ZIP else JSON_CONTENT_TYPE


def resolve_url(base_url: str, path: str) -> str:
    """Resolve a request path against the base URL.

    Absolute http(s) URLs are returned unchanged. Relative paths always
    resolve beneath the base URL, with any leading slashes dropped.

    Example:
        >>> resolve_url("http://h/api", "/v1/x")
        'http://h/api/v1/x'
    """
    if _ABSOLUTE_URL_PATTERN.match(path):
        return path
    base = base_url if base_url.endswith("/") else f"{base_url}/"
    return urljoin(base, path.lstrip("/"))


def _task_path(prefix: str, task_id: str) -> str:
    return f"{prefix}/{quote(task_id, safe='')}"


def _validate[M: BaseModel](model: type[M], data: object) -> M | None:
    # Empty success bodies (204, Content-Length: 0) decode to None
    return None if data is None else model.model_validate(data)


class DoclingServeClient:
    """Async client for the docling-serve REST API.

    Every method issues exactly one HTTP request. Non-2xx responses raise
    ``DoclingError``; transport errors from httpx (connection failures,
    timeouts) and task cancellation propagate unchanged. Nothing is retried
    or cached, and no state is kept between calls, so one client can be
    shared by concurrent tasks.

    A structured endpoint answering with an empty success body (204 or
    ``Content-Length: 0``) returns ``None`` instead of a model.

    Example:
        ```python
        async with DoclingServeClient("http://docling:5001") as client:
            task = await client.convert_from_source_async(
                ConvertDocumentsRequest(
                    sources=[HttpSourceRequest(url="https://arxiv.org/pdf/2408.09869")]
                )
            )
            status = await client.poll_task(task.task_id)
            if status.is_terminal:
                result = await client.get_task_result(task.task_id)
        ```

    Attributes:
        config: The immutable client configuration.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        api_key: str | None = None,
        headers: Mapping[str, str] | None = None,
        config: ClientConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the docling-serve client.

        Args:
            base_url: Base URL of the docling-serve instance
                (default: http://localhost:8000/). Overrides ``config``.
            api_key: API key sent in the ``X-Api-Key`` header (or the header
                named by ``config.api_key_header``). Overrides ``config``.
            headers: Default headers for every request, merged over those
                of ``config``.
            config: Base configuration; defaults to ``ClientConfig()``.
            http_client: An httpx client to send requests with. It is not
                closed by this client.
            transport: An httpx transport for the client created here,
                e.g. a mock transport in tests.

        Raises:
            ConfigurationError: If both http_client and transport are given,
                if http_client is already closed, or if the resulting
                configuration is invalid.
        """
        if http_client is not None and transport is not None:
            msg = "Pass either http_client or transport, not both"
            raise ConfigurationError(msg)
        if http_client is not None and http_client.is_closed:
            msg = "The provided http_client is closed"
            raise ConfigurationError(msg)

        self.config = self._build_config(
            config or ClientConfig(),
            base_url=base_url,
            api_key=api_key,
            headers=headers,
        )
        self._default_headers = self.config.default_headers()
        self._transport = transport
        self._client = http_client
        self._owns_client = http_client is None
        self._logger = get_logger(__name__)

    @staticmethod
    def _build_config(
        config: ClientConfig,
        *,
        base_url: str | None,
        api_key: str | None,
        headers: Mapping[str, str] | None,
    ) -> ClientConfig:
        overrides: dict[str, Any] = {}
        if base_url is not None:
            overrides["base_url"] = base_url
        if api_key is not None:
            overrides["api_key"] = api_key
        if headers is not None:
            # Header names are case-insensitive; the given casing wins
            replaced = {name.lower() for name in headers}
            overrides["headers"] = {
                name: value
                for name, value in config.headers.items()
                if name.lower() not in replaced
            } | dict(headers)
        if not overrides:
            return config
        try:
            return ClientConfig.model_validate(
                {**config.model_dump(exclude_unset=True), **overrides}
            )
        except ValueError as exc:
            msg = f"Invalid client configuration: {exc}"
            raise ConfigurationError(msg) from exc

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> Self:  # noqa: ANN401
        """Create a client from loaded settings.

        Args:
            settings: Settings, e.g. from ``load_settings()``.
            **kwargs: Extra constructor arguments (http_client, transport, ...).

        Returns:
            A new client.
        """
        return cls(config=settings.client, **kwargs)

    @property
    def base_url(self) -> str:
        """The normalized base URL, always ending with a slash."""
        return self.config.base_url

    async def __aenter__(self) -> Self:
        """Enter async context and create HTTP client."""
        await self._ensure_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context and close HTTP client."""
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure the HTTP client is initialized."""
        if self._client is None or (self._owns_client and self._client.is_closed):
            self._client = httpx.AsyncClient(
                timeout=self.config.httpx_timeout(),
                transport=self._transport,
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if it was created by this client."""
        client = self._client
        if self._owns_client and client is not None and not client.is_closed:
            await client.aclose()
            self._client = None

    # -------------------------------------------------------------------------
    # Request Dispatch
    # -------------------------------------------------------------------------

    def _merge_headers(self, extra: Mapping[str, str] | None) -> httpx.Headers:
        """Overlay per-call headers on the defaults; per-call values win."""
        headers = httpx.Headers(self._default_headers)
        if extra:
            headers.update(extra)
        return headers

    async def request(  # noqa: PLR0913
        self,
        method: str,
        path: str,
        *,
        body: object = None,
        headers: Mapping[str, str] | None = None,
        mode: ResponseMode = ResponseMode.JSON,
        default_accept: str | None = None,
    ) -> Any:  # noqa: ANN401
        """Send one request and decode its response.

        This is the single path every endpoint method goes through; it is
        public so that endpoints without a dedicated method can be reached.

        Args:
            method: HTTP method.
            path: Path relative to the base URL, or an absolute http(s) URL.
            body: Request payload. Wire bodies (str, bytes, multipart, ...)
                are sent as-is, anything else is sent as JSON.
            headers: Per-call headers, overriding the defaults.
            mode: How to decode a successful response.
            default_accept: Accept header used when none was set.

        Returns:
            The decoded response (see ``ResponseMode``).

        Raises:
            DoclingError: For any non-2xx response.
            httpx.TransportError: For network-level failures.
        """
        client = await self._ensure_client()
        url = resolve_url(self.config.base_url, path)

        request_headers = self._merge_headers(headers)
        if default_accept and "accept" not in request_headers:
            request_headers["Accept"] = default_accept

        prepared = prepare_body(body, request_headers)
        request = client.build_request(
            method,
            url,
            headers=request_headers,
            **(prepared.as_request_kwargs() if prepared is not None else {}),
        )

        log = self._logger.bind(
            method=method.upper(),
            path=path,
            request_id=generate_request_id(),
        )
        log.debug("api_request", url=url, mode=str(mode))

        response = await client.send(request, stream=True)

        if not response.is_success:
            error = await normalize_error(method, path, response)
            log.warning("api_error", status_code=error.status)
            raise error

        log.debug("api_response", status_code=response.status_code)
        return await decode_response(response, mode)

    async def _get_json(
        self,
        path: str,
        headers: Mapping[str, str] | None,
    ) -> Any:  # noqa: ANN401
        return await self.request(
            "GET",
            path,
            headers=headers,
            default_accept=JSON_CONTENT_TYPE,
        )

    async def _post(
        self,
        path: str,
        body: object,
        headers: Mapping[str, str] | None,
        response_type: ResponseType = ResponseType.JSON,
    ) -> Any:  # noqa: ANN401
        return await self.request(
            "POST",
            path,
            body=body,
            headers=headers,
            mode=response_type.mode,
            default_accept=response_type.accept,
        )

    # -------------------------------------------------------------------------
    # Service Information
    # -------------------------------------------------------------------------

    async def health(
        self,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> HealthCheckResponse | None:
        """Check that docling-serve is up.

        Returns:
            The health status.
        """
        data = await self._get_json("/health", headers)
        return _validate(HealthCheckResponse, data)

    async def get_openapi_document(
        self,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> dict[str, Any] | None:
        """Fetch the service's OpenAPI 3.0 schema document."""
        data: dict[str, Any] | None = await self._get_json("/openapi-3.0.json", headers)
        return data

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    async def convert_from_source(
        self,
        request: SourceRequest[ConvertDocumentsRequest],
        *,
        response_type: ResponseType = ResponseType.JSON,
        headers: Mapping[str, str] | None = None,
    ) -> ConvertResult | BinaryResult | None:
        """Convert documents from URLs or inline base64 sources.

        Args:
            request: Sources, conversion options and target.
            response_type: JSON for a ``ConvertResult``, ZIP for the archive.
            headers: Per-call headers.

        Returns:
            The conversion result, or the archive in ZIP mode.
        """
        data = await self._post("/v1/convert/source", request, headers, response_type)
        if data is None or isinstance(data, BinaryResult):
            return data
        return parse_convert_result(data)

    async def convert_from_source_async(
        self,
        request: SourceRequest[ConvertDocumentsRequest],
        *,
        headers: Mapping[str, str] | None = None,
    ) -> TaskStatusResponse | None:
        """Submit a source conversion as a background task.

        Returns:
            The task handle; poll it with ``poll_task``.
        """
        data = await self._post("/v1/convert/source/async", request, headers)
        return _validate(TaskStatusResponse, data)

    async def convert_from_file(
        self,
        files: FileInput | Sequence[FileInput],
        *,
        settings: FileSettings[ConvertFileSettings] | None = None,
        response_type: ResponseType = ResponseType.JSON,
        headers: Mapping[str, str] | None = None,
    ) -> ConvertResult | BinaryResult | None:
        """Convert uploaded files.

        Args:
            files: One or more files (bytes, paths, binary file objects or
                ``FileDescriptor``).
            settings: Conversion options sent as form fields.
            response_type: JSON for a ``ConvertResult``, ZIP for the archive.
            headers: Per-call headers.

        Returns:
            The conversion result, or the archive in ZIP mode.

        Raises:
            InvalidInputError: If no file is given.
        """
        form = create_multipart_body(FILES_FIELD, files, settings)
        data = await self._post("/v1/convert/file", form, headers, response_type)
        if data is None or isinstance(data, BinaryResult):
            return data
        return parse_convert_result(data)

    async def convert_from_file_async(
        self,
        files: FileInput | Sequence[FileInput],
        *,
        settings: FileSettings[ConvertFileSettings] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> TaskStatusResponse | None:
        """Submit a file conversion as a background task.

        Raises:
            InvalidInputError: If no file is given.
        """
        form = create_multipart_body(FILES_FIELD, files, settings)
        data = await self._post("/v1/convert/file/async", form, headers)
        return _validate(TaskStatusResponse, data)

    # -------------------------------------------------------------------------
    # Hybrid Chunking
    # -------------------------------------------------------------------------

    async def chunk_hybrid_from_source(
        self,
        request: SourceRequest[HybridChunkerOptionsDocumentsRequest],
        *,
        response_type: ResponseType = ResponseType.JSON,
        headers: Mapping[str, str] | None = None,
    ) -> ChunkDocumentResponse | BinaryResult | None:
        """Convert and chunk sources with the hybrid chunker."""
        data = await self._post(
            "/v1/chunk/hybrid/source", request, headers, response_type
        )
        if data is None or isinstance(data, BinaryResult):
            return data
        return ChunkDocumentResponse.model_validate(data)

    async def chunk_hybrid_from_source_async(
        self,
        request: SourceRequest[HybridChunkerOptionsDocumentsRequest],
        *,
        headers: Mapping[str, str] | None = None,
    ) -> TaskStatusResponse | None:
        """Submit hybrid chunking of sources as a background task."""
        data = await self._post("/v1/chunk/hybrid/source/async", request, headers)
        return _validate(TaskStatusResponse, data)

    async def chunk_hybrid_from_file(
        self,
        files: FileInput | Sequence[FileInput],
        *,
        settings: FileSettings[HybridChunkFileSettings] | None = None,
        response_type: ResponseType = ResponseType.JSON,
        headers: Mapping[str, str] | None = None,
    ) -> ChunkDocumentResponse | BinaryResult | None:
        """Convert and chunk uploaded files with the hybrid chunker."""
        form = create_multipart_body(FILES_FIELD, files, settings)
        data = await self._post("/v1/chunk/hybrid/file", form, headers, response_type)
        if data is None or isinstance(data, BinaryResult):
            return data
        return ChunkDocumentResponse.model_validate(data)

    async def chunk_hybrid_from_file_async(
        self,
        files: FileInput | Sequence[FileInput],
        *,
        settings: FileSettings[HybridChunkFileSettings] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> TaskStatusResponse | None:
        """Submit hybrid chunking of uploaded files as a background task."""
        form = create_multipart_body(FILES_FIELD, files, settings)
        data = await self._post("/v1/chunk/hybrid/file/async", form, headers)
        return _validate(TaskStatusResponse, data)

    # -------------------------------------------------------------------------
    # Hierarchical Chunking
    # -------------------------------------------------------------------------

    async def chunk_hierarchical_from_source(
        self,
        request: SourceRequest[HierarchicalChunkerOptionsDocumentsRequest],
        *,
        response_type: ResponseType = ResponseType.JSON,
        headers: Mapping[str, str] | None = None,
    ) -> ChunkDocumentResponse | BinaryResult | None:
        """Convert and chunk sources with the hierarchical chunker."""
        data = await self._post(
            "/v1/chunk/hierarchical/source", request, headers, response_type
        )
        if data is None or isinstance(data, BinaryResult):
            return data
        return ChunkDocumentResponse.model_validate(data)

    async def chunk_hierarchical_from_source_async(
        self,
        request: SourceRequest[HierarchicalChunkerOptionsDocumentsRequest],
        *,
        headers: Mapping[str, str] | None = None,
    ) -> TaskStatusResponse | None:
        """Submit hierarchical chunking of sources as a background task."""
        data = await self._post(
            "/v1/chunk/hierarchical/source/async", request, headers
        )
        return _validate(TaskStatusResponse, data)

    async def chunk_hierarchical_from_file(
        self,
        files: FileInput | Sequence[FileInput],
        *,
        settings: FileSettings[HierarchicalChunkFileSettings] | None = None,
        response_type: ResponseType = ResponseType.JSON,
        headers: Mapping[str, str] | None = None,
    ) -> ChunkDocumentResponse | BinaryResult | None:
        """Convert and chunk uploaded files with the hierarchical chunker."""
        form = create_multipart_body(FILES_FIELD, files, settings)
        data = await self._post(
            "/v1/chunk/hierarchical/file", form, headers, response_type
        )
        if data is None or isinstance(data, BinaryResult):
            return data
        return ChunkDocumentResponse.model_validate(data)

    async def chunk_hierarchical_from_file_async(
        self,
        files: FileInput | Sequence[FileInput],
        *,
        settings: FileSettings[HierarchicalChunkFileSettings] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> TaskStatusResponse | None:
        """Submit hierarchical chunking of uploaded files as a background task."""
        form = create_multipart_body(FILES_FIELD, files, settings)
        data = await self._post("/v1/chunk/hierarchical/file/async", form, headers)
        return _validate(TaskStatusResponse, data)

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    async def poll_task(
        self,
        task_id: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> TaskStatusResponse | None:
        """Get the current status of a background task.

        Scheduling repeated polls is left to the caller.

        Args:
            task_id: The task ID from an async submission.
            headers: Per-call headers.

        Returns:
            The task status.
        """
        data = await self._get_json(_task_path("/v1/status/poll", task_id), headers)
        return _validate(TaskStatusResponse, data)

    async def get_task_result(
        self,
        task_id: str,
        *,
        response_type: ResponseType = ResponseType.JSON,
        headers: Mapping[str, str] | None = None,
    ) -> ResultResponse | BinaryResult | None:
        """Fetch the result of a finished background task.

        The result has the same shape the synchronous counterpart of the
        submission returns.

        Args:
            task_id: The task ID from an async submission.
            response_type: JSON for the structured result, ZIP for the archive.
            headers: Per-call headers.

        Returns:
            A conversion or chunking result, or the archive in ZIP mode.
        """
        data = await self.request(
            "GET",
            _task_path("/v1/result", task_id),
            headers=headers,
            mode=response_type.mode,
            default_accept=response_type.accept,
        )
        if data is None or isinstance(data, BinaryResult):
            return data
        return parse_result_response(data)

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    async def clear_converters(
        self,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> ClearResponse | None:
        """Drop the service's cached converters."""
        data = await self._get_json("/v1/clear/converters", headers)
        return _validate(ClearResponse, data)

    async def clear_results(
        self,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> ClearResponse | None:
        """Drop stored task results on the service."""
        data = await self._get_json("/v1/clear/results", headers)
        return _validate(ClearResponse, data)


def create_docling_serve_client(
    base_url: str | None = None,
    **kwargs: Any,  # noqa: ANN401
) -> DoclingServeClient:
    """Create a ``DoclingServeClient``; see its constructor for arguments."""
    return DoclingServeClient(base_url, **kwargs)
