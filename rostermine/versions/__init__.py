"""Version management module."""

from .manager import VersionManager
from .download_manager import DownloadManager, DownloadReport
from .models import ArtifactRecord, VersionManifest, VersionInfo, VersionMetadata
from .planner import ArtifactPlanner

__all__ = ["VersionManager", "DownloadManager", "DownloadReport", "ArtifactRecord",
           "VersionManifest", "VersionInfo", "VersionMetadata", "ArtifactPlanner"]
