"""Temporary storage for images selected on the donation page.

A selected image is kept in storage so the page can show it back across
requests (the browser cannot re-populate a file input). Every acquired
preview must be released once the draft stops referring to it.
"""
import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, Optional

from django.conf import settings
from django.core.files.storage import default_storage
from django.urls import reverse
from django.utils.text import get_valid_filename

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageRef:
    name: str
    content_type: str
    filename: str = ""

    def to_dict(self) -> dict:
        return {"name": self.name, "content_type": self.content_type, "filename": self.filename}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["ImageRef"]:
        if not data or not data.get("name"):
            return None
        return cls(
            name=data["name"],
            content_type=data.get("content_type", ""),
            filename=data.get("filename", ""),
        )


def is_image_upload(uploaded_file) -> bool:
    """True when the declared media type of ``uploaded_file`` is an image type."""
    if uploaded_file is None:
        return False
    content_type = getattr(uploaded_file, "content_type", None) or ""
    return content_type.startswith("image/")


def preview_dir() -> str:
    return (getattr(settings, "PREVIEW_UPLOAD_DIR", "previews") or "previews").strip("/")


class PreviewStore:
    def __init__(self, storage=None):
        self.storage = storage or default_storage

    def acquire(self, uploaded_file) -> ImageRef:
        filename = os.path.basename(uploaded_file.name or "")
        ext = os.path.splitext(get_valid_filename(filename) if filename else "")[1].lower()
        name = self.storage.save(f"{preview_dir()}/{uuid.uuid4().hex}{ext}", uploaded_file)
        logger.debug("Acquired image preview name=%s filename=%s", name, filename)
        return ImageRef(name=name, content_type=uploaded_file.content_type or "", filename=filename)

    def url(self, ref: Optional[ImageRef]) -> Optional[str]:
        """Page URL that serves ``ref`` to the session holding it (see ``views.image_preview``)."""
        if ref is None:
            return None
        return reverse("donations:image_preview", kwargs={"filename": os.path.basename(ref.name)})

    def open(self, ref: ImageRef):
        return self.storage.open(ref.name, "rb")

    def release(self, ref: Optional[ImageRef]) -> None:
        if ref is None:
            return
        try:
            self.storage.delete(ref.name)
        except OSError:
            # left for purge_previews
            logger.warning("Could not release image preview name=%s", ref.name, exc_info=True)
        else:
            logger.debug("Released image preview name=%s", ref.name)

    def stale(self, cutoff: datetime) -> Iterator[str]:
        """Yield storage names of previews last modified before ``cutoff``."""
        directory = preview_dir()
        try:
            _, files = self.storage.listdir(directory)
        except FileNotFoundError:
            return
        for filename in sorted(files):
            name = f"{directory}/{filename}"
            if self.storage.get_modified_time(name) < cutoff:
                yield name
