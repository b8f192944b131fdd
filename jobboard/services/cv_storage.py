"""On-disk storage for uploaded CVs.

Files are written to ``settings.upload_dir`` and exposed by the static mount
in ``jobboard.main`` under ``CV_URL_PREFIX``.
"""

import logging
import re
import secrets
import time
from pathlib import Path

from jobboard.config import Settings, settings
from jobboard.core.exceptions import FileTooLargeError, InvalidFileError

logger = logging.getLogger(__name__)

CV_URL_PREFIX = "/uploads/cvs"
PDF_MAGIC = b"%PDF"
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def validate_cv(filename: str | None, content: bytes, cfg: Settings = settings) -> None:
    """Reject anything that is not a .pdf within the size limit."""
    if not filename or not filename.lower().endswith(".pdf"):
        raise InvalidFileError()
    max_bytes = cfg.max_cv_upload_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise FileTooLargeError(f"File too large. Max allowed is {cfg.max_cv_upload_mb}MB.")
    if not content:
        raise InvalidFileError("Uploaded file is empty")
    if cfg.cv_require_pdf_magic and not content.startswith(PDF_MAGIC):
        raise InvalidFileError("Invalid PDF file content.")


def stored_name(filename: str) -> str:
    """Millisecond timestamp + random suffix + sanitized original name."""
    base = _UNSAFE_CHARS.sub("_", Path(filename).name).strip("._") or "cv.pdf"
    if not base.lower().endswith(".pdf"):
        base = f"{base}.pdf"
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}-{base}"


def save_cv(filename: str, content: bytes, cfg: Settings = settings) -> tuple[str, Path]:
    """Write the file and return (public cv_url, path on disk)."""
    upload_dir = Path(cfg.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    name = stored_name(filename)
    path = upload_dir / name
    path.write_bytes(content)
    logger.info("Stored CV %s (%d bytes)", name, len(content))
    return f"{CV_URL_PREFIX}/{name}", path


def delete_cv(path: Path) -> None:
    path.unlink(missing_ok=True)
