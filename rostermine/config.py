"""Launcher configuration and on-disk layout."""

import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any

from pydantic import BaseModel, ValidationError

from .errors import FilesystemError

logger = logging.getLogger(__name__)

MANIFEST_URL = "https://piston-meta.mojang.com/mc/game/version_manifest_v2.json"
RESOURCES_URL = "https://resources.download.minecraft.net"
DEFAULT_CONFIG_FILE = "launcher_config.json"


class LauncherConfig(BaseModel):
    version: str = "release"
    data_dir: Path = Path("data")
    instance_dir: Path = Path("instances") / "Default"
    player_name: str = "Player"
    java_path: Optional[Path] = None
    min_memory: str = "1G"
    max_memory: str = "4G"
    extra_jvm_args: list = []
    resolution_width: int = 854
    resolution_height: int = 480
    concurrent_downloads: int = 8
    retries: int = 5
    backoff: float = 0.5
    timeout: float = 30.0
    manifest_url: str = MANIFEST_URL
    resources_url: str = RESOURCES_URL

    @classmethod
    def load(cls, path: Optional[Path] = None, overrides: Optional[Dict[str, Any]] = None) -> "LauncherConfig":
        """Read settings from a JSON file, then apply non-empty overrides."""
        data: Dict[str, Any] = {}
        config_path = Path(path) if path else Path(DEFAULT_CONFIG_FILE)
        if config_path.exists():
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                logger.warning(f"Could not parse {config_path}: {e}. Using defaults.")
            except OSError as e:
                raise FilesystemError(f"Could not read {config_path}: {e}") from e
        elif path:
            logger.warning(f"Config file {config_path} not found. Using defaults.")

        for key, value in (overrides or {}).items():
            if value is not None:
                data[key] = value

        try:
            return cls(**data)
        except ValidationError as e:
            logger.warning(f"Invalid launcher config: {e}. Using defaults.")
            return cls(**{k: v for k, v in (overrides or {}).items() if v is not None})

    @property
    def layout(self) -> "DataLayout":
        return DataLayout(self.data_dir)


class DataLayout:
    """Every path the launcher reads or writes below the data directory."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.versions_dir = self.data_dir / "versions"
        self.libraries_dir = self.data_dir / "libraries"
        self.assets_dir = self.data_dir / "assets"
        self.asset_indexes_dir = self.assets_dir / "indexes"
        self.asset_objects_dir = self.assets_dir / "objects"
        self.manifest_path = self.data_dir / "version_manifest_v2.json"

    def version_dir(self, version_id: str) -> Path:
        return self.versions_dir / version_id

    def version_json(self, version_id: str) -> Path:
        return self.version_dir(version_id) / f"{version_id}.json"

    def client_jar(self, version_id: str) -> Path:
        return self.version_dir(version_id) / f"{version_id}.jar"

    def natives_dir(self, version_id: str) -> Path:
        return self.version_dir(version_id) / "natives"

    def asset_index(self, index_id: str) -> Path:
        return self.asset_indexes_dir / f"{index_id}.json"

    def asset_object(self, sha1: str) -> Path:
        return self.asset_objects_dir / sha1[:2] / sha1

    def library(self, relative_path: str) -> Path:
        return self.libraries_dir / relative_path
