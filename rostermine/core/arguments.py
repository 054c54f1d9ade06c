"""Launch argument rendering."""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel

from .. import LAUNCHER_NAME, __version__
from ..versions.models import ArgumentEntry, VersionMetadata
from ..versions.rules import Host

logger = logging.getLogger(__name__)

# JVM properties that newer manifests point at the natives directory
NATIVE_PROPERTIES = (
    "java.library.path",
    "jna.tmpdir",
    "org.lwjgl.system.SharedLibraryExtractPath",
    "io.netty.native.workdir",
)

# Used when the manifest only has a legacy "minecraftArguments" string
LEGACY_JVM_ARGUMENTS = ["-Djava.library.path=${natives_directory}", "-cp", "${classpath}"]


class RuntimeContext(BaseModel):
    """Everything the argument templates can refer to, built once per launch."""
    player_name: str
    uuid: str
    access_token: str = "0"
    xuid: str = "0"
    client_id: str = "0"
    user_type: str = "offline"
    user_properties: str = "{}"
    version_id: str
    version_type: str = "release"
    game_directory: Path
    assets_root: Path
    asset_index_name: str
    natives_directory: Path
    libraries_directory: Path
    classpath: str
    classpath_separator: str
    launcher_name: str = LAUNCHER_NAME
    launcher_version: str = __version__
    resolution_width: int = 854
    resolution_height: int = 480

    def placeholders(self) -> Dict[str, str]:
        values = {
            "${auth_player_name}": self.player_name,
            "${version_name}": self.version_id,
            "${game_directory}": str(self.game_directory),
            "${assets_root}": str(self.assets_root),
            "${game_assets}": str(self.assets_root),
            "${assets_index_name}": self.asset_index_name,
            "${auth_uuid}": self.uuid,
            "${auth_access_token}": self.access_token,
            "${auth_session}": self.access_token,
            "${auth_xuid}": self.xuid,
            "${clientid}": self.client_id,
            "${user_type}": self.user_type,
            "${user_properties}": self.user_properties,
            "${version_type}": self.version_type,
            "${classpath}": self.classpath,
            "${classpath_separator}": self.classpath_separator,
            "${natives_directory}": str(self.natives_directory),
            "${library_directory}": str(self.libraries_directory),
            "${launcher_name}": self.launcher_name,
            "${launcher_version}": self.launcher_version,
            "${resolution_width}": str(self.resolution_width),
            "${resolution_height}": str(self.resolution_height),
        }
        for prop in NATIVE_PROPERTIES:
            values[f"-D{prop}=${{natives_directory}}"] = f"-D{prop}={self.natives_directory}"
        values["-Dminecraft.launcher.brand=${launcher_name}"] = f"-Dminecraft.launcher.brand={self.launcher_name}"
        values["-Dminecraft.launcher.version=${launcher_version}"] = f"-Dminecraft.launcher.version={self.launcher_version}"
        return values


def classpath_separator(host: Host) -> str:
    return ":" if host.is_posix else ";"


def join_classpath(paths: Iterable[Path], host: Host) -> str:
    return classpath_separator(host).join(str(path) for path in paths)


def render(entries: Optional[Sequence[ArgumentEntry]], context: RuntimeContext) -> List[str]:
    """Replace placeholder tokens with their runtime values.

    Only whole tokens are replaced; anything not in the placeholder table is
    kept as is. Rule-gated entries are left out.
    """
    placeholders = context.placeholders()
    tokens = []
    for entry in entries or []:
        if not isinstance(entry, str):
            logger.debug(f"Skipping rule-gated argument {entry.value!r}")
            continue
        tokens.append(placeholders.get(entry, entry))
    return tokens


def jvm_arguments(metadata: VersionMetadata, context: RuntimeContext) -> List[str]:
    template = metadata.argument_template
    entries = template.jvm if template.jvm else LEGACY_JVM_ARGUMENTS
    return render(entries, context)


def game_arguments(metadata: VersionMetadata, context: RuntimeContext) -> List[str]:
    return render(metadata.argument_template.game, context)


def logging_argument(metadata: VersionMetadata, config_path: Path) -> Optional[str]:
    """The JVM flag pointing the game's logger at the downloaded config file."""
    config = metadata.logging.get("client")
    if config is None or not config.argument or config.file is None:
        return None
    return config.argument.replace("${path}", str(config_path))
