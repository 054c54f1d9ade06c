"""Platform rules for libraries and arguments."""

import logging
import platform
import re
from typing import Dict, Iterable, Optional

from pydantic import BaseModel

from .models import Rule

logger = logging.getLogger(__name__)

POSIX_OS_NAMES = ("linux", "osx")


class Host(BaseModel):
    """The platform rules are evaluated against, captured once per run."""
    os: str
    arch: str
    os_version: str = ""
    features: Dict[str, bool] = {}

    @property
    def is_posix(self) -> bool:
        return self.os in POSIX_OS_NAMES

    @property
    def arch_bits(self) -> str:
        """Pointer width, used to fill ``${arch}`` in legacy native classifiers."""
        return "32" if self.arch in ("x86", "arm32") else "64"


def get_os_name(system: Optional[str] = None) -> str:
    """Gets the OS name the version manifests use ('windows', 'osx', 'linux')."""
    system = system or platform.system()
    if system == 'Windows': return 'windows'
    elif system == 'Darwin': return 'osx'
    elif system == 'Linux': return 'linux'
    else:
        logger.warning(f"Unsupported platform: {system}. Rules for windows, osx and linux will not match.")
        return system.lower()


def get_arch_name(machine: Optional[str] = None) -> str:
    """Gets the architecture name ('x64', 'x86', 'arm64', 'arm32')."""
    machine = (machine or platform.machine()).lower()
    if machine in ['amd64', 'x86_64']: return 'x64'
    elif machine in ['i386', 'i686', 'x86']: return 'x86'
    elif machine in ['arm64', 'aarch64']: return 'arm64'
    elif machine.startswith('arm') and '64' not in machine: return 'arm32'
    else:
        logger.warning(f"Unsupported architecture: {machine}. Falling back to 'x64'.")
        return 'x64'


def detect_host(features: Optional[Dict[str, bool]] = None) -> Host:
    return Host(os=get_os_name(), arch=get_arch_name(), os_version=platform.release(),
                features=features or {})


def rule_applies(rule: Rule, host: Host) -> bool:
    """True if every predicate of the rule matches the host. No predicate always applies."""
    if rule.os is not None:
        if rule.os.name and rule.os.name != host.os:
            return False
        if rule.os.arch and rule.os.arch != host.arch:
            return False
        if rule.os.version:
            try:
                if not re.search(rule.os.version, host.os_version):
                    return False
            except re.error:
                logger.debug(f"Ignoring bad os.version pattern {rule.os.version!r}")
                return False
    if rule.features:
        for name, wanted in rule.features.items():
            if host.features.get(name, False) != wanted:
                return False
    return True


def evaluate(rules: Optional[Iterable[Rule]], host: Host) -> bool:
    """Whether an item guarded by ``rules`` is allowed on ``host``.

    No rules means allowed. Otherwise the verdict starts as disallowed and
    each rule that applies to the host overwrites it with its own action;
    rules that do not apply leave it untouched.
    """
    rules = list(rules or [])
    if not rules:
        return True

    allowed = False
    for rule in rules:
        if not rule_applies(rule, host):
            continue
        if rule.action == "allow":
            allowed = True
        elif rule.action == "disallow":
            allowed = False
        else:
            logger.warning(f"Unknown rule action: {rule.action}. Treating as disallow.")
            allowed = False
    return allowed
