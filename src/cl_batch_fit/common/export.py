"""Export boundary: named result buffers and the archive sink they feed."""

from __future__ import annotations

import zipfile
from collections.abc import Iterable
from io import BytesIO
from pathlib import PurePath
from typing import ClassVar, Protocol, runtime_checkable

from typing_extensions import override

from pydantic import BaseModel, ConfigDict, Field

from ..utils.media_types import get_extension
from .schema_item import ImageItem, ItemStatus

SINGLE_PREFIX = "resized_{width}x{height}_"
ARCHIVE_PREFIX = "batch_"


class ExportEntry(BaseModel):
    file_name: str
    data: bytes = Field(..., repr=False)
    mime_type: str

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


def output_file_name(item: ImageItem, prefix: str) -> str:
    """Display name with the given prefix and the extension of the actual output."""
    if item.result is None:
        raise ValueError(f"Item {item.item_id} has no result")

    name = PurePath(item.name).name or item.item_id
    stem = PurePath(name).stem or name
    return f"{prefix}{stem}.{get_extension(item.result.format)}"


def export_item(item: ImageItem, *, archive: bool = False) -> ExportEntry | None:
    """Export entry for a done item, None for anything else.

    Individual downloads are named resized_{w}x{h}_{name}, archive members
    batch_{name}.
    """
    if item.status != ItemStatus.done or item.result is None:
        return None

    if archive:
        prefix = ARCHIVE_PREFIX
    else:
        prefix = SINGLE_PREFIX.format(width=item.result.width, height=item.result.height)

    return ExportEntry(
        file_name=output_file_name(item, prefix),
        data=item.result.data,
        mime_type=item.result.mime_type,
    )


def export_items(items: Iterable[ImageItem], *, archive: bool = False) -> list[ExportEntry]:
    return [entry for item in items if (entry := export_item(item, archive=archive)) is not None]


# ---------------------------------------------------------------------------
# Archive sink
# ---------------------------------------------------------------------------


@runtime_checkable
class ArchiveSink(Protocol):
    """Pass-through sink accepting named byte buffers."""

    def add(self, file_name: str, data: bytes) -> str:
        """Store one buffer. Returns the name actually used."""
        ...

    def finish(self) -> bytes:
        """Close the archive and return its bytes."""
        ...


class ZipArchiveSink(ArchiveSink):
    """In-memory ZIP archive. Duplicate names get a numeric suffix."""

    def __init__(self) -> None:
        self._buffer: BytesIO = BytesIO()
        self._zip: zipfile.ZipFile = zipfile.ZipFile(self._buffer, "w", zipfile.ZIP_DEFLATED)
        self._names: set[str] = set()

    def _unique(self, file_name: str) -> str:
        if file_name not in self._names:
            return file_name
        path = PurePath(file_name)
        counter = 1
        while True:
            candidate = f"{path.stem}_{counter}{path.suffix}"
            if candidate not in self._names:
                return candidate
            counter += 1

    @override
    def add(self, file_name: str, data: bytes) -> str:
        name = self._unique(file_name)
        self._zip.writestr(name, data)
        self._names.add(name)
        return name

    @override
    def finish(self) -> bytes:
        self._zip.close()
        return self._buffer.getvalue()


def build_archive(entries: Iterable[ExportEntry], sink: ArchiveSink | None = None) -> bytes:
    sink = sink if sink is not None else ZipArchiveSink()
    for entry in entries:
        _ = sink.add(entry.file_name, entry.data)
    return sink.finish()
