"""
Video upload validation utilities

- Content type must be video/*
- File size limit, enforced while reading so oversized uploads are not
  buffered in full
- Empty files rejected
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import UploadFile

from flockr.core.exceptions import ValidationError

READ_CHUNK_SIZE = 1024 * 1024


@dataclass
class VideoUpload:
    """A validated video held in memory."""
    content: bytes
    filename: str
    content_type: str

    @property
    def size_bytes(self) -> int:
        return len(self.content)


def validate_video_content_type(content_type: Optional[str]) -> str:
    content_type = (content_type or "").lower()
    if not content_type.startswith("video/"):
        raise ValidationError("Only video files are allowed")
    return content_type


async def read_video_upload(upload: Optional[UploadFile], max_bytes: int) -> Optional[VideoUpload]:
    """
    Validate and read an uploaded video.

    Returns None when no file was sent (form field absent or empty filename).

    Raises:
        ValidationError: Wrong content type, too large, or empty
    """
    if upload is None or not upload.filename:
        return None

    content_type = validate_video_content_type(upload.content_type)

    chunks = []
    total = 0
    while True:
        chunk = await upload.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            max_mb = max_bytes // (1024 * 1024)
            raise ValidationError(f"Video exceeds maximum size of {max_mb}MB")
        chunks.append(chunk)

    if total == 0:
        raise ValidationError("Uploaded video is empty")

    return VideoUpload(
        content=b"".join(chunks),
        filename=upload.filename,
        content_type=content_type,
    )
