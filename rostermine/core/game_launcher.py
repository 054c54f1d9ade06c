"""Game launcher for Minecraft."""

import logging
import os
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import DataLayout
from ..errors import MalformedManifest
from ..versions.models import VersionMetadata
from ..versions.rules import Host
from .arguments import RuntimeContext, classpath_separator, game_arguments, jvm_arguments, logging_argument

logger = logging.getLogger(__name__)

LIBRARY_PATH_VARIABLES = {
    "linux": "LD_LIBRARY_PATH",
    "osx": "DYLD_LIBRARY_PATH",
}


class GameLauncher:
    def __init__(self, layout: DataLayout, instance_dir: Path, host: Host):
        self.layout = layout
        self.instance_dir = Path(instance_dir)
        self.host = host

    def build_context(self, metadata: VersionMetadata, user_profile: Dict[str, Any], classpath: str,
                      resolution: Optional[tuple] = None) -> RuntimeContext:
        """Collect the runtime values the argument templates refer to."""
        width, height = resolution or (854, 480)
        return RuntimeContext(
            player_name=user_profile["name"],
            uuid=user_profile.get("id", "0"),
            access_token=user_profile.get("access_token") or "0",
            user_type=user_profile.get("type", "offline"),
            version_id=metadata.id,
            version_type=metadata.type or "release",
            game_directory=self.instance_dir,
            assets_root=self.layout.assets_dir,
            asset_index_name=metadata.asset_index_id,
            natives_directory=self.layout.natives_dir(metadata.id),
            libraries_directory=self.layout.libraries_dir,
            classpath=classpath,
            classpath_separator=classpath_separator(self.host),
            resolution_width=width,
            resolution_height=height,
        )

    def native_env(self, natives_dir: Path, base_env: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Environment overrides putting the natives directory on the loader's search path."""
        variable = LIBRARY_PATH_VARIABLES.get(self.host.os)
        if variable is None:
            return {}
        base_env = os.environ if base_env is None else base_env
        old = base_env.get(variable)
        return {variable: f"{natives_dir}{os.pathsep}{old}" if old else str(natives_dir)}

    def prepare_launch(self, metadata: VersionMetadata, context: RuntimeContext, java_path: Path,
                       memory: tuple = ("1G", "4G"), extra_jvm_args: Optional[List[str]] = None) -> Dict:
        """Prepare launch command."""
        command = [str(java_path), f"-Xms{memory[0]}", f"-Xmx{memory[1]}"]
        command.extend(extra_jvm_args or [])

        logging_config = metadata.logging.get("client")
        if logging_config and logging_config.file and logging_config.file.sha1:
            argument = logging_argument(metadata, self.layout.asset_object(logging_config.file.sha1))
            if argument:
                command.append(argument)

        command.extend(jvm_arguments(metadata, context))
        if not metadata.mainClass:
            raise MalformedManifest(f"Version {metadata.id} has no main class")
        command.append(metadata.mainClass)
        command.extend(game_arguments(metadata, context))

        env_overrides = self.native_env(context.natives_directory)
        env = os.environ.copy()
        env.update(env_overrides)

        return {
            "command": command,
            "cwd": self.instance_dir,
            "env": env,
            "env_overrides": env_overrides,
        }

    def launch_game(self, launch_data: Dict) -> subprocess.Popen:
        """Launch the game process."""
        Path(launch_data["cwd"]).mkdir(parents=True, exist_ok=True)
        logger.info(f"Launching: {' '.join(launch_data['command'])}")
        return subprocess.Popen(
            args=launch_data["command"],
            cwd=launch_data["cwd"],
            env=launch_data["env"],
            stdin=subprocess.DEVNULL,
        )
