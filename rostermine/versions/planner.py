"""Turns a version package into the list of files it needs."""

import logging
from pathlib import Path
from typing import List, Set, Tuple

from ..config import DataLayout, RESOURCES_URL
from ..errors import MalformedManifest
from .models import ArtifactKind, ArtifactRecord, AssetIndex, VersionMetadata
from .rules import Host, evaluate

logger = logging.getLogger(__name__)

DEFAULT_NATIVE_EXCLUDES = ["META-INF/"]

# Spellings used by the "natives-<os>[-<arch>]" artifact classifiers
NATIVE_OS_NAMES = {"osx": ("osx", "macos")}
NATIVE_ARCH_NAMES = {"arm64": ("arm64", "aarch_64")}


def host_native_classifiers(host: Host) -> Set[str]:
    """Artifact classifiers whose natives the host can load."""
    os_names = NATIVE_OS_NAMES.get(host.os, (host.os,))
    arch_names = NATIVE_ARCH_NAMES.get(host.arch, (host.arch,))
    classifiers = {f"natives-{os_name}" for os_name in os_names}
    classifiers.update(f"natives-{os_name}-{arch}" for os_name in os_names for arch in arch_names)
    return classifiers


def _coordinate(lib) -> str:
    return lib.name.split("@", 1)[0].rsplit(":", 1)[0]


class ArtifactPlanner:
    def __init__(self, layout: DataLayout, resources_url: str = RESOURCES_URL):
        self.layout = layout
        self.resources_url = resources_url.rstrip("/")

    def plan(self, metadata: VersionMetadata, asset_index: AssetIndex, host: Host) -> List[ArtifactRecord]:
        """Every file the version needs, in a fixed order.

        Assets first, then class path libraries, host natives, the client jar
        and finally the logging config. Missing optional fields simply produce
        no record of that kind.
        """
        records = []
        records.extend(self.asset_records(asset_index))
        records.extend(self.library_records(metadata, host))
        records.extend(self.native_records(metadata, host))
        records.append(self.client_record(metadata))
        logging_record = self.logging_record(metadata)
        if logging_record:
            records.append(logging_record)

        logger.debug(f"Planned {len(records)} artifacts for {metadata.id}")
        return records

    def asset_records(self, asset_index: AssetIndex) -> List[ArtifactRecord]:
        records = []
        for asset in asset_index.objects.values():
            subdir = asset.hash[:2]
            records.append(ArtifactRecord(
                kind=ArtifactKind.ASSET,
                target=self.layout.asset_object(asset.hash),
                url=f"{self.resources_url}/{subdir}/{asset.hash}",
                sha1=asset.hash,
                size=asset.size,
            ))
        return records

    def library_records(self, metadata: VersionMetadata, host: Host) -> List[ArtifactRecord]:
        records = []
        for lib in metadata.libraries:
            if not evaluate(lib.rules, host):
                continue
            artifact = lib.artifact()
            if artifact is None:
                continue
            if not artifact.url:
                logger.debug(f"Library {lib.name} has no download URL, skipping")
                continue
            records.append(ArtifactRecord(
                kind=ArtifactKind.LIBRARY,
                target=self.layout.library(artifact.path),
                url=artifact.url,
                sha1=artifact.sha1,
                size=artifact.size,
            ))
        return records

    def native_records(self, metadata: VersionMetadata, host: Host) -> List[ArtifactRecord]:
        records = []
        for lib in metadata.libraries:
            if not evaluate(lib.rules, host):
                continue
            native = lib.native_classifier(host.os, host.arch_bits)
            if native is None or not native.url:
                continue
            records.append(ArtifactRecord(
                kind=ArtifactKind.NATIVE,
                target=self.layout.library(native.path),
                url=native.url,
                sha1=native.sha1,
                size=native.size,
            ))
        return records

    def client_record(self, metadata: VersionMetadata) -> ArtifactRecord:
        client = metadata.downloads.get("client")
        if client is None or not client.url:
            raise MalformedManifest(f"Version {metadata.id} has no client download")
        return ArtifactRecord(
            kind=ArtifactKind.CLIENT,
            target=self.layout.client_jar(metadata.id),
            url=client.url,
            sha1=client.sha1,
            size=client.size,
            essential=True,
        )

    def logging_record(self, metadata: VersionMetadata):
        config = metadata.logging.get("client")
        if config is None or config.file is None:
            return None
        file = config.file
        if not file.sha1 or not file.url:
            return None
        return ArtifactRecord(
            kind=ArtifactKind.LOGGING,
            target=self.layout.asset_object(file.sha1),
            url=file.url,
            sha1=file.sha1,
            size=file.size,
        )

    def classpath(self, metadata: VersionMetadata, host: Host) -> List[Path]:
        """Library jars in manifest order, client jar last."""
        paths = []
        for lib in metadata.libraries:
            if not evaluate(lib.rules, host):
                continue
            artifact = lib.artifact()
            if artifact is not None:
                paths.append(self.layout.library(artifact.path))
        paths.append(self.layout.client_jar(metadata.id))
        return paths

    def native_archives(self, metadata: VersionMetadata, host: Host) -> List[Tuple[Path, List[str]]]:
        """Archives to unpack into the natives directory, with their exclude prefixes."""
        archives = []
        wanted = host_native_classifiers(host)
        allowed = [lib for lib in metadata.libraries if evaluate(lib.rules, host)]
        # coordinates that also ship a build for the host arch; their plain natives are x64 only
        arch_specific = {_coordinate(lib) for lib in allowed
                         if lib.classifier in wanted and lib.classifier.count("-") > 1}
        for lib in allowed:
            excludes = lib.excludes or list(DEFAULT_NATIVE_EXCLUDES)
            native = lib.native_classifier(host.os, host.arch_bits)
            if native is not None and native.url:
                archives.append((self.layout.library(native.path), excludes))
                continue
            # Newer manifests ship natives as plain artifacts named "...:natives-<os>[-arch]"
            if lib.classifier in wanted:
                if lib.classifier.count("-") == 1 and _coordinate(lib) in arch_specific:
                    continue
                artifact = lib.artifact()
                if artifact is not None and artifact.url:
                    archives.append((self.layout.library(artifact.path), excludes))
        return archives
