"""Update-then-launch pipeline."""

import asyncio
import logging
from typing import Dict, Optional

from ..auth import OfflineAuthenticator
from ..config import LauncherConfig
from ..runtime.java_manager import JavaManager
from ..utils.async_http import AsyncHTTPClient
from ..versions.download_manager import DownloadManager, DownloadReport, ProgressCallback
from ..versions.manager import VersionManager
from ..versions.models import VersionMetadata
from ..versions.planner import ArtifactPlanner
from ..versions.rules import Host, detect_host
from .arguments import join_classpath
from .game_launcher import GameLauncher
from .natives import NativeExtractor

logger = logging.getLogger(__name__)


def _check_cancelled(cancel_event: Optional[asyncio.Event]):
    if cancel_event is not None and cancel_event.is_set():
        raise asyncio.CancelledError("Launch cancelled")


class Launcher:
    """Resolve, update and start one version.

    Phases run strictly in order: resolve, plan, download, extract natives,
    build the command line, spawn. ``cancel_event`` is checked between
    phases and between artifacts.
    """

    def __init__(self, config: LauncherConfig, host: Optional[Host] = None,
                 http: Optional[AsyncHTTPClient] = None, java_manager: Optional[JavaManager] = None):
        self.config = config
        self.layout = config.layout
        self.host = host or detect_host()
        self.http = http or AsyncHTTPClient(retries=config.retries, backoff=config.backoff,
                                            timeout=config.timeout)
        self.versions = VersionManager(self.layout, self.http, config.manifest_url)
        self.planner = ArtifactPlanner(self.layout, config.resources_url)
        self.downloads = DownloadManager(self.http, config.concurrent_downloads)
        self.game = GameLauncher(self.layout, config.instance_dir, self.host)
        self.java = java_manager or JavaManager()

    async def __aenter__(self):
        await self.http.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.http.close()

    async def update(self, version_id: str, cancel_event: Optional[asyncio.Event] = None,
                     progress_callback: Optional[ProgressCallback] = None) -> VersionMetadata:
        """Make every file of a version present and verified. Returns its package."""
        metadata = await self.versions.resolve(version_id)
        _check_cancelled(cancel_event)

        asset_index = await self.versions.resolve_asset_index(metadata)
        _check_cancelled(cancel_event)

        records = self.planner.plan(metadata, asset_index, self.host)
        size = sum(record.size or 0 for record in records)
        logger.info(f"Checking {len(records)} files ({size / 1048576:.1f} MB) for {metadata.id}")

        report: DownloadReport = await self.downloads.sync(records, cancel_event, progress_callback)
        if not report.ok:
            logger.warning(f"{len(report.failed)} files could not be downloaded; the game may not start")
        _check_cancelled(cancel_event)

        extractor = NativeExtractor(self.layout.natives_dir(metadata.id))
        await extractor.extract_natives(self.planner.native_archives(metadata, self.host))
        return metadata

    async def prepare(self, metadata: VersionMetadata, user_profile: Optional[Dict] = None) -> Dict:
        """Build the command line for an updated version."""
        if user_profile is None:
            user_profile = await OfflineAuthenticator.authenticate(self.config.player_name)

        classpath = join_classpath(self.planner.classpath(metadata, self.host), self.host)
        context = self.game.build_context(
            metadata, user_profile, classpath,
            (self.config.resolution_width, self.config.resolution_height),
        )
        required = metadata.javaVersion.majorVersion if metadata.javaVersion else None
        java_path = self.java.ensure_java(required, self.config.java_path)
        return self.game.prepare_launch(
            metadata, context, java_path,
            (self.config.min_memory, self.config.max_memory),
            self.config.extra_jvm_args,
        )

    async def run(self, version_id: Optional[str] = None, cancel_event: Optional[asyncio.Event] = None,
                  launch: bool = True) -> Dict:
        metadata = await self.update(version_id or self.config.version, cancel_event)
        _check_cancelled(cancel_event)
        launch_data = await self.prepare(metadata)
        if launch:
            process = self.game.launch_game(launch_data)
            launch_data["returncode"] = await asyncio.get_running_loop().run_in_executor(None, process.wait)
        return launch_data
