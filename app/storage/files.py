import hashlib
import os
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Final

from fastapi import UploadFile

from app.core.config import settings

FILENAME_SAFE_RE: Final[re.Pattern[str]] = re.compile(r"[^A-Za-z0-9._-]+")
DOC_ID_RE: Final[re.Pattern[str]] = re.compile(r"^[a-f0-9]{16,64}$")

ZIP_MAGIC: Final[bytes] = b"PK\x03\x04"
OLE2_MAGIC: Final[bytes] = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


@dataclass(frozen=True)
class SavedFile:
    doc_id: str
    original_filename: str
    stored_filename: str
    content_type: str
    size_bytes: int
    sha256: str
    stored_path: str
    file_url: str
    created_at: str


def sanitize_filename(filename: str) -> str:
    filename = os.path.basename((filename or "").strip())
    filename = FILENAME_SAFE_RE.sub("_", filename)
    return filename or "file"


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def get_upload_root() -> Path:
    return Path(settings.DATA_DIR) / "uploads"


def build_file_url(doc_id: str, stored_filename: str) -> str:
    return f"/files/{doc_id}/{stored_filename}"


def resolve_stored_file(doc_id: str, filename: str) -> Path:
    """
    Path of a stored upload, or FileNotFoundError.
    doc_id is validated and the filename re-sanitized, so the result
    always stays inside <upload_root>/<doc_id>/original.
    """
    if not DOC_ID_RE.match(doc_id):
        raise FileNotFoundError("INVALID_DOC_ID")

    p = get_upload_root() / doc_id / "original" / sanitize_filename(filename)
    if not p.is_file():
        raise FileNotFoundError("FILE_NOT_FOUND")

    return p


def _unique_dest_path(dest_dir: Path, stored_filename: str) -> Path:
    """
    If filename already exists, add a short suffix before extension.
    """
    candidate = dest_dir / stored_filename
    if not candidate.exists():
        return candidate

    # report.docx -> report_1a2b3c4d.docx
    stem = candidate.stem
    suffix = candidate.suffix
    for _ in range(50):
        extra = uuid.uuid4().hex[:8]
        candidate2 = dest_dir / f"{stem}_{extra}{suffix}"
        if not candidate2.exists():
            return candidate2

    return dest_dir / f"{stem}_{uuid.uuid4().hex}{suffix}"


def sniff_magic(filename: str, first_bytes: bytes) -> bool:
    """
    Basic 'magic bytes' verification against the file extension,
    so a renamed executable is not accepted as a document.
    """
    suffix = Path(filename or "").suffix.lower()

    if suffix == ".pdf":
        return first_bytes.startswith(b"%PDF")

    # OOXML containers are zip archives
    if suffix in (".docx", ".xlsx", ".pptx"):
        return first_bytes.startswith(ZIP_MAGIC)

    if suffix == ".doc":
        return first_bytes.startswith(OLE2_MAGIC)

    if suffix == ".txt":
        return b"\x00" not in first_bytes

    return False


async def read_first_bytes(upload_file: UploadFile, n: int = 16) -> bytes:
    """
    Read first n bytes and reset pointer.
    """
    await upload_file.seek(0)
    b = await upload_file.read(n)
    await upload_file.seek(0)
    return b


async def read_upload_bytes(upload_file: UploadFile, max_bytes: int) -> bytes:
    """
    Read the whole upload into memory, enforcing max_bytes.
    """
    await upload_file.seek(0)

    buf = bytearray()
    chunk_size = 1024 * 1024  # 1MB
    while True:
        chunk = await upload_file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise ValueError("FILE_TOO_LARGE")

    return bytes(buf)


async def save_upload_file_streaming(
    *,
    upload_file: UploadFile,
    doc_id: str,
    max_bytes: int,
) -> SavedFile:
    """
    Streams UploadFile to disk in chunks, calculates sha256, enforces max_bytes.
    Uses atomic write: write to temp -> rename to final file.
    Avoids overwriting by making filename unique.
    """
    dest_dir = get_upload_root() / doc_id / "original"
    ensure_dir(dest_dir)

    original_filename = upload_file.filename or "file"
    stored_filename = sanitize_filename(original_filename)

    final_path = _unique_dest_path(dest_dir, stored_filename)
    tmp_path = final_path.with_name(final_path.name + f".tmp_{uuid.uuid4().hex}")

    hasher = hashlib.sha256()
    total = 0
    chunk_size = 1024 * 1024  # 1MB

    await upload_file.seek(0)

    try:
        with tmp_path.open("wb") as f:
            while True:
                chunk = await upload_file.read(chunk_size)
                if not chunk:
                    break
                total += len(chunk)
                if total > max_bytes:
                    raise ValueError("FILE_TOO_LARGE")
                hasher.update(chunk)
                f.write(chunk)

        tmp_path.replace(final_path)

    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise
    finally:
        await upload_file.close()

    created_at = datetime.now(timezone.utc).isoformat()
    content_type = upload_file.content_type or "application/octet-stream"

    return SavedFile(
        doc_id=doc_id,
        original_filename=original_filename,
        stored_filename=final_path.name,
        content_type=content_type,
        size_bytes=total,
        sha256=hasher.hexdigest(),
        stored_path=str(final_path),
        file_url=build_file_url(doc_id, final_path.name),
        created_at=created_at,
    )
