"""
Media Ingestion — Turn uploaded files into embeddable data URIs.

Uploaded files are stored inside the document itself as
``data:<mime>;base64,...`` URIs. Nothing is compressed or resized, so
large files quickly push the document past the remote payload ceiling.

## Usage

    media = ingest_file("notice.pdf", data, "application/pdf")
    notice_patch = {"attachmentUrl": media.url, "fileName": media.file_name}

    # Bulk gallery upload: each finished file is handed to `on_item`
    # immediately; one bad file does not hold up the rest.
    report = ingest_gallery(sources, on_item=draft_append)
"""

from __future__ import annotations

import base64
import logging
import mimetypes
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Literal, Optional

from ..config.loader import DEFAULT_PAYLOAD_CEILING
from ..models.document import GalleryItem

logger = logging.getLogger(__name__)

MediaKind = Literal["image", "video", "pdf", "document"]

# Broad media-type prefixes accepted for attachments
ATTACHMENT_PREFIXES = (
    "image/",
    "video/",
    "application/pdf",
    "application/msword",
    "application/vnd.ms-",
    "application/vnd.openxmlformats-officedocument.",
)
GALLERY_PREFIXES = ("image/", "video/")

DEFAULT_WORKERS = 4


class MediaRejected(ValueError):
    """Raised when a file cannot be ingested."""


@dataclass
class MediaSource:
    """An uploaded file whose bytes are read lazily by `read`."""

    name: str
    read: Callable[[], bytes]
    mime_type: Optional[str] = None


@dataclass
class IngestedMedia:
    url: str
    file_name: str
    mime_type: str
    size_bytes: int
    kind: MediaKind

    def to_dict(self) -> Dict[str, object]:
        return {
            "url": self.url,
            "fileName": self.file_name,
            "mimeType": self.mime_type,
            "sizeBytes": self.size_bytes,
            "kind": self.kind,
        }


@dataclass
class GalleryIngestReport:
    added: List[GalleryItem] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {
            "added": [item.to_wire() for item in self.added],
            "errors": self.errors,
        }


def resolve_mime(name: str, declared: Optional[str]) -> str:
    if declared and declared != "application/octet-stream":
        return declared
    return mimetypes.guess_type(name)[0] or "application/octet-stream"


def media_kind(mime_type: str) -> MediaKind:
    if mime_type.startswith("image/"):
        return "image"
    if mime_type.startswith("video/"):
        return "video"
    if mime_type == "application/pdf":
        return "pdf"
    return "document"


def to_data_uri(data: bytes, mime_type: str) -> str:
    b64 = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{b64}"


def ingest_file(
    name: str,
    data: bytes,
    mime_type: Optional[str] = None,
    accepted: Iterable[str] = ATTACHMENT_PREFIXES,
    ceiling: int = DEFAULT_PAYLOAD_CEILING,
) -> IngestedMedia:
    """
    Encode one file as a data URI.

    Raises:
        MediaRejected: empty file or a media type outside `accepted`
    """
    if not data:
        raise MediaRejected(f"{name}: empty file")

    mime = resolve_mime(name, mime_type)
    if not mime.startswith(tuple(accepted)):
        raise MediaRejected(f"{name}: unsupported media type {mime}")

    url = to_data_uri(data, mime)
    if len(url) > ceiling:
        logger.warning(
            f"{name} encodes to {len(url)} chars, above the {ceiling} char remote limit; "
            f"consider linking an external URL instead",
            extra={"payload_chars": len(url)},
        )
    logger.info(f"Ingested {name} ({len(data)} bytes, {mime})")
    return IngestedMedia(
        url=url,
        file_name=name,
        mime_type=mime,
        size_bytes=len(data),
        kind=media_kind(mime),
    )


def _to_gallery_item(media: IngestedMedia) -> GalleryItem:
    return GalleryItem(url=media.url, type="video" if media.kind == "video" else "image", caption="")


def ingest_gallery(
    sources: Iterable[MediaSource],
    on_item: Callable[[GalleryItem], Optional[bool]],
    max_workers: int = DEFAULT_WORKERS,
    ceiling: int = DEFAULT_PAYLOAD_CEILING,
) -> GalleryIngestReport:
    """
    Ingest many gallery files concurrently.

    Each file is read and encoded on its own task. As soon as a task
    finishes its item is passed to `on_item`, so results become visible
    one by one. A failing file is recorded in the report's errors and
    does not affect the others. When `on_item` returns False the item was
    not kept, and it is reported as an error instead of as added.
    """
    report = GalleryIngestReport()
    sources = list(sources)
    if not sources:
        return report

    def work(source: MediaSource) -> IngestedMedia:
        return ingest_file(
            source.name,
            source.read(),
            source.mime_type,
            accepted=GALLERY_PREFIXES,
            ceiling=ceiling,
        )

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="gallery-ingest") as pool:
        futures = {pool.submit(work, source): source for source in sources}
        for future in as_completed(futures):
            source = futures[future]
            try:
                media = future.result()
            except (MediaRejected, OSError) as e:
                logger.warning(f"Skipped gallery file {source.name}: {e}")
                report.errors[source.name] = str(e)
                continue
            item = _to_gallery_item(media)
            if on_item(item) is False:
                logger.warning(f"Gallery file {source.name} was not added")
                report.errors[source.name] = "Not added"
                continue
            report.added.append(item)

    logger.info(f"Gallery upload: {len(report.added)} added, {len(report.errors)} failed")
    return report
