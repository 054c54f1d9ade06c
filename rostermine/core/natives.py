"""Native library extraction."""

import asyncio
import logging
import zipfile
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Sequence, Tuple

from ..errors import FilesystemError
from ..utils.files import persist

logger = logging.getLogger(__name__)


def _excluded(member: str, excludes: Sequence[str]) -> bool:
    return any(member.startswith(prefix) for prefix in excludes)


def extract_archive(archive: Path, natives_dir: Path, excludes: Sequence[str] = ()) -> List[Path]:
    """Unpack one native archive into ``natives_dir``, dropping directory structure.

    Existing files are overwritten, so running it twice gives the same result.
    """
    extracted = []
    try:
        with zipfile.ZipFile(archive, 'r') as zip_ref:
            for member in zip_ref.infolist():
                if member.is_dir() or _excluded(member.filename, excludes):
                    continue
                name = PurePosixPath(member.filename).name
                if not name:
                    continue
                target = natives_dir / name
                persist(target, zip_ref.read(member))
                extracted.append(target)
    except zipfile.BadZipFile as e:
        raise FilesystemError(f"Failed to read native archive {archive}: {e}") from e
    except OSError as e:
        raise FilesystemError(f"Failed to extract {archive}: {e}") from e
    return extracted


class NativeExtractor:
    def __init__(self, natives_dir: Path):
        self.natives_dir = Path(natives_dir)

    def extract_all(self, archives: Iterable[Tuple[Path, Sequence[str]]]) -> List[Path]:
        extracted = []
        try:
            self.natives_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Could not create {self.natives_dir}: {e}") from e
        for archive, excludes in archives:
            if not Path(archive).is_file():
                logger.warning(f"Native archive {archive} is missing, skipping")
                continue
            logger.debug(f"Extracting {archive}")
            extracted.extend(extract_archive(archive, self.natives_dir, excludes))
        logger.info(f"Extracted {len(extracted)} native files to {self.natives_dir}")
        return extracted

    async def extract_natives(self, archives: Iterable[Tuple[Path, Sequence[str]]]) -> List[Path]:
        """Extract native archives without blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.extract_all, list(archives))
