"""
File to embeddable-content encoding.

Selected files are read in the background and turned into an
``EncodedFile`` (MIME type plus standard base64 of the raw bytes). The
preview and storage form is the data URI ``data:<mime>;base64,<payload>``.
"""

import base64
import binascii
import mimetypes
import os
import threading
from typing import Callable, Optional, Set

from core.data.models import (
    EncodedFile, build_data_uri, DATA_URI_PREFIX, DATA_URI_BASE64_MARKER
)
from core.utils.exceptions import FileReadError, FileWriteError
from core.utils.helpers import ensure_directory, get_safe_filename
from core.utils.logger import get_module_logger
from workers.task_worker import Executor, run_in_background

logger = get_module_logger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"
DEFAULT_FIELD = "content"

EncodeCallback = Callable[[Optional[EncodedFile], Optional[Exception]], None]

__all__ = [
    'FileEncoder', 'encode_bytes', 'read_file', 'guess_mime_type',
    'build_data_uri', 'parse_data_uri', 'decode_content', 'save_content',
]


def guess_mime_type(path: str) -> str:
    """MIME type from the file name, application/octet-stream when unknown."""
    mime_type, _ = mimetypes.guess_type(path, strict=False)
    return mime_type or DEFAULT_MIME_TYPE


def encode_bytes(data: bytes, mime_type: str, filename: str = "") -> EncodedFile:
    """Encode raw bytes as standard base64."""
    return EncodedFile(
        mime_type=mime_type,
        base64=base64.b64encode(data).decode('ascii'),
        filename=filename,
    )


def read_file(path: str, mime_type: Optional[str] = None) -> EncodedFile:
    """
    Read a file from disk and encode it.

    Args:
        path: File to read
        mime_type: Explicit type; guessed from the file name when omitted

    Returns:
        EncodedFile carrying the file's base name

    Raises:
        FileReadError: If the file cannot be read
    """
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise FileReadError(f"Could not read {path}: {e.strerror or e}", filepath=path, original_exception=e)

    return encode_bytes(data, mime_type or guess_mime_type(path), filename=os.path.basename(path))


def parse_data_uri(uri: str) -> EncodedFile:
    """
    Split a base64 data URI into type and payload.

    Raises:
        ValueError: If ``uri`` is not a base64 data URI
    """
    if not uri.startswith(DATA_URI_PREFIX) or DATA_URI_BASE64_MARKER not in uri:
        raise ValueError("Not a base64 data URI")
    header, payload = uri[len(DATA_URI_PREFIX):].split(",", 1)
    mime_type = header[:-len(";base64")]
    return EncodedFile(mime_type=mime_type, base64=payload)


def decode_content(content: str) -> bytes:
    """Decode a base64 payload back into the raw bytes."""
    try:
        return base64.b64decode(content, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FileReadError(f"Attachment content is not valid base64: {e}", original_exception=e)


def save_content(content: str, directory: str, filename: str) -> str:
    """
    Write a decoded payload into ``directory``.

    Returns:
        Path of the written file
    """
    ensure_directory(directory)
    path = os.path.join(directory, get_safe_filename(filename))
    data = decode_content(content)
    try:
        with open(path, 'wb') as f:
            f.write(data)
    except OSError as e:
        raise FileWriteError(f"Could not write {path}: {e.strerror or e}", filepath=path, original_exception=e)

    logger.info("Attachment content saved", path=path, size=len(data))
    return path


class FileEncoder:
    """
    Reads selected files asynchronously, one read per input field at a time.

    Results are delivered as ``on_done(encoded, error)``; failures are logged
    and reported as FileReadError, never retried.
    """

    def __init__(self, executor: Executor = run_in_background):
        self._executor = executor
        self._in_flight: Set[str] = set()
        self._lock = threading.Lock()

    def is_reading(self, field: str = DEFAULT_FIELD) -> bool:
        with self._lock:
            return field in self._in_flight

    def encode(self, path: str, on_done: EncodeCallback, field: str = DEFAULT_FIELD) -> bool:
        """
        Start reading ``path`` for ``field``.

        Returns:
            False if a read for the same field is still in flight, in which
            case nothing is started and ``on_done`` is never called
        """
        with self._lock:
            if field in self._in_flight:
                logger.warning("File read already in progress", field=field, path=path)
                return False
            self._in_flight.add(field)

        def finished(result: Optional[EncodedFile], error: Optional[Exception]) -> None:
            with self._lock:
                self._in_flight.discard(field)
            if error is not None:
                if not isinstance(error, FileReadError):
                    error = FileReadError(f"Could not read {path}: {error}", filepath=path, original_exception=error)
                logger.error("File read failed", field=field, path=path, error=error.message)
                on_done(None, error)
                return
            logger.debug("File encoded", field=field, filename=result.filename, mime_type=result.mime_type)
            on_done(result, None)

        logger.debug("Reading file", field=field, path=path)
        self._executor(f"encode-{field}", lambda: read_file(path), finished)
        return True
