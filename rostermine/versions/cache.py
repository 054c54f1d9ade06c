"""Local cache checks for planned artifacts."""

import logging
from pathlib import Path
from typing import Optional

from ..utils.files import file_sha1
from .models import ArtifactRecord

logger = logging.getLogger(__name__)


def hash_matches(path: Path, expected_sha1: Optional[str]) -> bool:
    """True if ``path`` is a regular file whose SHA1 equals ``expected_sha1``."""
    if not expected_sha1:
        return False
    path = Path(path)
    if not path.is_file():
        return False
    try:
        return file_sha1(path).lower() == expected_sha1.lower()
    except OSError as e:
        logger.warning(f"Could not hash {path}: {e}")
        return False


class ContentCache:
    """Decides whether a planned artifact is already present on disk."""

    @staticmethod
    def is_satisfied(record: ArtifactRecord) -> bool:
        # Nothing to compare against, so presence is all we can check
        if not record.sha1:
            return Path(record.target).is_file()
        return hash_matches(record.target, record.sha1)
