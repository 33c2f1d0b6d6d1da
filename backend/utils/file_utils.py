import os
import re
import shutil
import tempfile
import uuid
from contextlib import contextmanager
from typing import BinaryIO, Iterator, Optional


def safe_filename(filename: Optional[str], fallback: str = "uploaded_file") -> str:
    return re.sub(r'[^a-zA-Z0-9_.-]', '_', filename or fallback) or fallback


def unique_key(folder: str, filename: Optional[str]) -> str:
    return f"{folder.strip('/')}/{uuid.uuid4()}_{safe_filename(filename)}"


@contextmanager
def spooled_to_disk(stream: BinaryIO, tmp_dir: str, filename: Optional[str] = None) -> Iterator[str]:
    """Copy an upload stream to a local temp file and yield its path.

    The file is removed on every exit path.
    """
    os.makedirs(tmp_dir, exist_ok=True)
    _, ext = os.path.splitext(filename or '')
    fd, path = tempfile.mkstemp(dir=tmp_dir, suffix=ext)
    try:
        with os.fdopen(fd, 'wb') as out:
            stream.seek(0)
            shutil.copyfileobj(stream, out)
        yield path
    finally:
        if os.path.exists(path):
            os.remove(path)
