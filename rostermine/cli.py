"""Command line entry point."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import LauncherConfig
from .core.pipeline import Launcher
from .errors import LauncherError
from .utils.logger import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rostermine", description="A simple Minecraft launcher")
    parser.add_argument("-l", "--launch", dest="version", metavar="VERSION",
                        help="version id or channel (release, snapshot) to update and launch")
    parser.add_argument("-i", "--instance-dir", type=Path, help="directory for saves, mods, etc.")
    parser.add_argument("-d", "--data-dir", type=Path, help="directory for versions, libraries and assets")
    parser.add_argument("-u", "--username", dest="player_name", help="offline player name")
    parser.add_argument("-c", "--config", type=Path, help="launcher config JSON file")
    parser.add_argument("--java", dest="java_path", type=Path, help="Java executable to use")
    parser.add_argument("--update-only", action="store_true", help="download files but do not start the game")
    parser.add_argument("--list", nargs="?", const="all", metavar="TYPE",
                        help="list available versions (optionally only TYPE, e.g. release)")
    parser.add_argument("--verbose", action="store_true", help="debug output on the console")
    parser.add_argument("-v", "--version", action="version", version=f"RosterMine {__version__}")
    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose)

    config = LauncherConfig.load(args.config, {
        "version": args.version,
        "instance_dir": args.instance_dir,
        "data_dir": args.data_dir,
        "player_name": args.player_name,
        "java_path": args.java_path,
    })

    async with Launcher(config) as launcher:
        if args.list:
            kind = None if args.list == "all" else args.list
            for info in await launcher.versions.list_versions(kind):
                print(f"{info.id}\t{info.type}")
            return 0

        print(f"\nUpdating version {config.version}. . .")
        result = await launcher.run(config.version, launch=not args.update_only)
        return result.get("returncode") or 0


def run():
    try:
        sys.exit(asyncio.run(main()))
    except LauncherError as e:
        logger.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)
