"""File helpers shared by the resolver, cache and downloader."""

import hashlib
import os
import tempfile
import uuid
from pathlib import Path
from typing import Union

import aiofiles
import aiofiles.os

from ..errors import FilesystemError

CHUNK_SIZE = 65536


def file_sha1(path: Path) -> str:
    """Calculate the SHA1 hex digest of a file."""
    sha1 = hashlib.sha1()
    with open(path, 'rb') as f:
        while chunk := f.read(CHUNK_SIZE):
            sha1.update(chunk)
    return sha1.hexdigest()


def bytes_sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def persist(path: Path, data: Union[bytes, str]):
    """Write a whole file, replacing any previous one in a single rename.

    The content is written to a temporary sibling first, so a reader never
    sees a half-written file under the final name.
    """
    if isinstance(data, str):
        data = data.encode('utf-8')
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".part")
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise
    except OSError as e:
        raise FilesystemError(f"Could not write {path}: {e}") from e


async def persist_async(path: Path, data: bytes):
    """Async twin of :func:`persist` for the download workers."""
    path = Path(path)
    tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.part")
    try:
        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        try:
            async with aiofiles.open(tmp_path, 'wb') as f:
                await f.write(data)
            await aiofiles.os.replace(tmp_path, path)
        except BaseException:
            if await aiofiles.os.path.exists(tmp_path):
                await aiofiles.os.remove(tmp_path)
            raise
    except OSError as e:
        raise FilesystemError(f"Could not write {path}: {e}") from e
