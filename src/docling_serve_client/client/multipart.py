"""Multipart form bodies for the file upload endpoints."""

from __future__ import annotations

import json
import mimetypes
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import IO, Any

from pydantic import BaseModel

from docling_serve_client.client.body import FilePart, MultipartBody, json_default
from docling_serve_client.client.exceptions import InvalidInputError


__all__ = [
    "BinaryLike",
    "FileDescriptor",
    "FileInput",
    "create_multipart_body",
]


DEFAULT_FILE_CONTENT_TYPE = "application/octet-stream"

type BinaryLike = bytes | bytearray | memoryview | Path | IO[bytes]


@dataclass(frozen=True, slots=True)
class FileDescriptor:
    """A file payload with an optional filename and content type override.

    Attributes:
        data: The file content.
        filename: Name sent with the upload. Defaults to the payload's own
            name, or ``file-<n>``.
        content_type: Content type sent with the upload. Defaults to a guess
            from the payload's own name, or ``application/octet-stream``.
    """

    data: BinaryLike
    filename: str | None = None
    content_type: str | None = None


type FileInput = BinaryLike | FileDescriptor

type Settings = Mapping[str, Any] | BaseModel


def _own_name(data: BinaryLike) -> str | None:
    """Return the payload's own filename, if it has one."""
    if isinstance(data, Path):
        return data.name
    name = getattr(data, "name", None)
    if isinstance(name, str) and name:
        return Path(name).name
    return None


def _read_payload(data: BinaryLike) -> Any:  # noqa: ANN401
    if isinstance(data, Path):
        return data.read_bytes()
    if isinstance(data, bytearray | memoryview):
        return bytes(data)
    return data


def _to_file_part(entry: FileInput, index: int) -> FilePart:
    descriptor = entry if isinstance(entry, FileDescriptor) else FileDescriptor(entry)
    own_name = _own_name(descriptor.data)
    filename = descriptor.filename or own_name or f"file-{index + 1}"

    content_type = descriptor.content_type
    if content_type is None and own_name is not None:
        content_type = mimetypes.guess_type(own_name)[0]

    return FilePart(
        filename=filename,
        content=_read_payload(descriptor.data),
        content_type=content_type or DEFAULT_FILE_CONTENT_TYPE,
    )


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, BaseModel):
        return value.model_dump_json(exclude_none=True, by_alias=True)
    if isinstance(value, Mapping):
        return json.dumps(value, default=json_default)
    return str(value)


def _expand_setting(key: str, value: object) -> list[tuple[str, str]]:
    """Expand one setting into form fields.

    None is dropped, lists repeat the key once per item, objects become a
    single JSON text field.
    """
    if value is None:
        return []
    if isinstance(value, list | tuple):
        fields: list[tuple[str, str]] = []
        for item in value:
            fields.extend(_expand_setting(key, item))
        return fields
    return [(key, _format_value(value))]


def _settings_items(settings: Settings) -> list[tuple[str, Any]]:
    if isinstance(settings, BaseModel):
        return list(settings.model_dump(exclude_none=True, by_alias=True).items())
    return list(settings.items())


def create_multipart_body(
    file_field: str,
    files: FileInput | Sequence[FileInput],
    settings: Settings | None = None,
) -> MultipartBody:
    """Build a multipart body from files and a flat settings map.

    Args:
        file_field: Form field name used for every file (e.g. ``files``).
        files: One file input or a sequence of them.
        settings: Extra form fields, appended after the files in order.

    Returns:
        The multipart body.

    Raises:
        InvalidInputError: If no file is given.
    """
    if isinstance(files, FileDescriptor | bytes | bytearray | memoryview | Path):
        entries: Sequence[FileInput] = [files]
    elif isinstance(files, Sequence):
        entries = files
    else:
        entries = [files]

    if not entries:
        msg = "At least one file must be provided"
        raise InvalidInputError(msg)

    file_parts = tuple(
        (file_field, _to_file_part(entry, index))
        for index, entry in enumerate(entries)
    )

    fields: list[tuple[str, str]] = []
    if settings is not None:
        for key, value in _settings_items(settings):
            fields.extend(_expand_setting(key, value))

    return MultipartBody(files=file_parts, fields=tuple(fields))
