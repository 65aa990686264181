import logging
import os
import re
import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import UploadFile

from classroom.core.config import get_settings
from classroom.services.errors import FileTooLargeError, InvalidUploadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
_unsafe_chars = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class StoredFile:
    file_name: str
    file_path: str
    content_type: Optional[str]
    size: int


def _human_size(num_bytes: int) -> str:
    if num_bytes >= 1024 * 1024:
        return f"{num_bytes // (1024 * 1024)}MB"
    return f"{num_bytes // 1024}KB"


def safe_file_name(file_name: str) -> str:
    name = os.path.basename(file_name.replace("\\", "/"))
    name = _unsafe_chars.sub("_", name).strip("._")
    return name or "file"


def save_upload(upload: UploadFile, folder: str) -> StoredFile:
    """Copy an uploaded file under ``files_dir/folder``.

    The copy is streamed in chunks and aborted once it passes
    ``max_upload_bytes``; a partial file never stays on disk.
    """
    if not upload.filename:
        raise InvalidUploadError()

    settings = get_settings()
    target_dir = os.path.join(settings.files_dir, folder)
    os.makedirs(target_dir, exist_ok=True)
    file_path = os.path.join(target_dir, f"{uuid.uuid4().hex}_{safe_file_name(upload.filename)}")

    size = 0
    with open(file_path, "wb") as output:
        while True:
            chunk = upload.file.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > settings.max_upload_bytes:
                break
            output.write(chunk)

    if size > settings.max_upload_bytes:
        os.remove(file_path)
        logger.warning("Rejected upload %s: larger than %d bytes", upload.filename, settings.max_upload_bytes)
        raise FileTooLargeError(f"File size should be less than {_human_size(settings.max_upload_bytes)}")

    logger.info("Stored upload %s (%d bytes) at %s", upload.filename, size, file_path)
    return StoredFile(
        file_name=upload.filename,
        file_path=file_path,
        content_type=upload.content_type,
        size=size,
    )


def delete_file(file_path: Optional[str]) -> None:
    if not file_path:
        return
    try:
        os.remove(file_path)
    except FileNotFoundError:
        logger.warning("Stored file %s was already missing", file_path)
    else:
        logger.info("Removed stored file %s", file_path)
