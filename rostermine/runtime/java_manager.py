"""Java runtime lookup for Minecraft."""

import logging
import os
import platform
import re
import shutil
import subprocess
from pathlib import Path
from typing import Optional, List

from ..errors import LauncherError

logger = logging.getLogger(__name__)


def java_executable_name() -> str:
    return "java.exe" if platform.system() == "Windows" else "java"


def parse_major_version(version: str) -> Optional[int]:
    """'1.8.0_292' -> 8, '17.0.1' -> 17, '21' -> 21."""
    match = re.match(r"(\d+)(?:\.(\d+))?", version)
    if not match:
        return None
    major = int(match.group(1))
    if major == 1 and match.group(2):
        return int(match.group(2))
    return major


class JavaManager:
    COMMON_PATHS = [
        Path("C:/Program Files/Java"),
        Path("C:/Program Files (x86)/Java"),
        Path("/usr/lib/jvm"),
        Path("/Library/Java/JavaVirtualMachines")
    ]

    def __init__(self, runtime_dir: Optional[Path] = None):
        self.runtime_dir = runtime_dir

    def candidates(self) -> List[Path]:
        """Java executables worth trying, most preferred first."""
        found = []
        java_home = os.environ.get("JAVA_HOME")
        if java_home:
            found.append(Path(java_home) / "bin" / java_executable_name())
        on_path = shutil.which("java")
        if on_path:
            found.append(Path(on_path))

        bases = list(self.COMMON_PATHS)
        if self.runtime_dir:
            bases.insert(0, self.runtime_dir)
        for base in bases:
            if not base.is_dir():
                continue
            for item in sorted(base.iterdir()):
                for java_bin in (item / "bin" / java_executable_name(),
                                 item / "Contents" / "Home" / "bin" / java_executable_name()):
                    if java_bin.exists():
                        found.append(java_bin)
        return [path for path in found if path.exists()]

    def get_java_version(self, java_path: Path) -> Optional[str]:
        """Get Java version."""
        try:
            result = subprocess.run([str(java_path), "-version"], capture_output=True, text=True, timeout=15)
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"Could not run {java_path}: {e}")
            return None
        # version is on stderr
        match = re.search(r'version "([^"]+)"', result.stderr or result.stdout)
        return match.group(1) if match else None

    def ensure_java(self, required_major: Optional[int] = None, configured: Optional[Path] = None) -> Path:
        """Pick a Java executable, preferring one with the required major version."""
        if configured:
            if not Path(configured).exists():
                raise LauncherError(f"Configured Java {configured} does not exist")
            return Path(configured)

        candidates = self.candidates()
        if not candidates:
            raise LauncherError("Could not find a Java runtime; set java_path or JAVA_HOME")
        if required_major is None:
            return candidates[0]

        for java_path in candidates:
            version = self.get_java_version(java_path)
            if version and parse_major_version(version) == required_major:
                logger.info(f"Using Java {version} at {java_path}")
                return java_path

        logger.warning(f"No Java {required_major} found, trying {candidates[0]}")
        return candidates[0]
