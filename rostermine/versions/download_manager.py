"""Download manager for assets and libraries."""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from ..errors import FilesystemError, IntegrityError, LauncherError, NetworkError
from ..utils.async_http import AsyncHTTPClient
from ..utils.files import bytes_sha1, persist_async
from .cache import ContentCache
from .models import ArtifactRecord

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ArtifactRecord, int, int], Awaitable[None]]


class DownloadReport:
    """What happened to each record of a sync run."""

    def __init__(self):
        self.satisfied: List[ArtifactRecord] = []
        self.downloaded: List[ArtifactRecord] = []
        self.failed: List[Tuple[ArtifactRecord, LauncherError]] = []

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def downloaded_bytes(self) -> int:
        return sum(record.size or 0 for record in self.downloaded)

    def __repr__(self):
        return (f"DownloadReport(satisfied={len(self.satisfied)}, downloaded={len(self.downloaded)}, "
                f"failed={len(self.failed)})")


class DownloadManager:
    """Makes sure every planned artifact exists locally with the right hash.

    Records are processed concurrently, at most ``concurrent_downloads`` at a
    time. A failed record is reported and does not stop the others unless it
    is marked essential.
    """

    def __init__(self, http: AsyncHTTPClient, concurrent_downloads: int = 8,
                 cache: Optional[ContentCache] = None):
        self.http = http
        self.concurrent_downloads = concurrent_downloads
        self.semaphore = asyncio.Semaphore(concurrent_downloads)
        self.cache = cache or ContentCache()
        self._path_locks: Dict[Path, asyncio.Lock] = {}

    def _lock_for(self, path: Path) -> asyncio.Lock:
        key = Path(path).resolve()
        if key not in self._path_locks:
            self._path_locks[key] = asyncio.Lock()
        return self._path_locks[key]

    async def _is_satisfied(self, record: ArtifactRecord) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.cache.is_satisfied, record)

    async def download_file(self, record: ArtifactRecord) -> bytes:
        """Fetch a record's bytes and check them. One retry on a hash mismatch."""
        for attempt in range(2):
            data = await self.http.get_bytes(record.url)
            if not record.sha1:
                return data
            actual = bytes_sha1(data)
            if actual.lower() == record.sha1.lower():
                return data
            error = IntegrityError(record.target, record.sha1, actual)
            if attempt == 0:
                logger.warning(f"{error}. Retrying once.")
        raise error

    async def ensure(self, record: ArtifactRecord, cancel_event: Optional[asyncio.Event] = None) -> bool:
        """Make one record satisfied. Returns True if it had to be downloaded."""
        async with self._lock_for(record.target):
            if await self._is_satisfied(record):
                return False

            async with self.semaphore:
                if cancel_event is not None and cancel_event.is_set():
                    raise asyncio.CancelledError("Download cancelled")
                logger.debug(f"GET {record.url}")
                data = await self.download_file(record)

            await persist_async(record.target, data)
            return True

    async def sync(self, records: List[ArtifactRecord], cancel_event: Optional[asyncio.Event] = None,
                   progress_callback: Optional[ProgressCallback] = None) -> DownloadReport:
        """Check and fetch every record.

        ``cancel_event`` is checked before each record; once set, records that
        have not started yet are skipped and ``asyncio.CancelledError`` is
        raised after in-flight ones finish.
        """
        report = DownloadReport()
        total = len(records)
        done = 0

        async def run(record: ArtifactRecord):
            nonlocal done
            if cancel_event is not None and cancel_event.is_set():
                return
            try:
                downloaded = await self.ensure(record, cancel_event)
            except (NetworkError, IntegrityError, FilesystemError) as e:
                logger.error(f"Failed to fetch {record.url} -> {record.target}: {e}")
                report.failed.append((record, e))
                if record.essential:
                    raise
                return
            if downloaded:
                report.downloaded.append(record)
            else:
                report.satisfied.append(record)
            done += 1
            if progress_callback:
                await progress_callback(record, done, total)

        tasks = [asyncio.ensure_future(run(record)) for record in records]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        if cancel_event is not None and cancel_event.is_set():
            raise asyncio.CancelledError("Download cancelled")

        logger.info(f"{len(report.satisfied)} files up to date, {len(report.downloaded)} downloaded, "
                    f"{len(report.failed)} failed")
        return report
