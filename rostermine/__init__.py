"""RosterMine - a small command line Minecraft launcher."""

__version__ = "0.1.0"
LAUNCHER_NAME = "rostermine"
