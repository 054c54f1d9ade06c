"""Data models for Minecraft versions."""

from enum import Enum
from pathlib import Path
from pydantic import BaseModel, PrivateAttr
from typing import Dict, List, Optional, Union, Literal
from datetime import datetime


class DownloadSpec(BaseModel):
    path: Optional[str] = None
    sha1: Optional[str] = None
    size: Optional[int] = None
    url: Optional[str] = None


class VersionLibraryExtractor(BaseModel):
    exclude: Optional[List[str]] = None


class VersionLibraryDownloads(BaseModel):
    artifact: Optional[DownloadSpec] = None
    classifiers: Optional[Dict[str, DownloadSpec]] = None


class RuleOs(BaseModel):
    name: Optional[str] = None
    version: Optional[str] = None
    arch: Optional[str] = None


class Rule(BaseModel):
    action: str = "allow"
    os: Optional[RuleOs] = None
    features: Optional[Dict[str, bool]] = None


def maven_path(name: str, classifier: Optional[str] = None) -> str:
    """Relative repository path for a ``group:artifact:version[:classifier][@ext]`` coordinate."""
    extension = "jar"
    if "@" in name:
        name, extension = name.rsplit("@", 1)
    parts = name.split(":")
    if len(parts) < 3:
        raise ValueError(f"Not a maven coordinate: {name}")
    group, artifact, version = parts[0], parts[1], parts[2]
    if classifier is None and len(parts) > 3:
        classifier = parts[3]
    filename = f"{artifact}-{version}" + (f"-{classifier}" if classifier else "") + f".{extension}"
    return "/".join([group.replace(".", "/"), artifact, version, filename])


class VersionLibrary(BaseModel):
    name: str
    downloads: Optional[VersionLibraryDownloads] = None
    rules: Optional[List[Rule]] = None
    extract: Optional[VersionLibraryExtractor] = None
    natives: Optional[Dict[str, str]] = None
    # Maven repository base used by loader profiles that ship no "downloads"
    url: Optional[str] = None
    sha1: Optional[str] = None
    size: Optional[int] = None

    @property
    def classifier(self) -> Optional[str]:
        parts = self.name.split("@", 1)[0].split(":")
        return parts[3] if len(parts) > 3 else None

    def artifact(self) -> Optional[DownloadSpec]:
        """The main jar download, with its path filled in from the coordinate."""
        if self.downloads and self.downloads.artifact:
            artifact = self.downloads.artifact
            if artifact.path:
                return artifact
            return artifact.model_copy(update={"path": maven_path(self.name)})
        if self.url and not self.downloads:
            path = maven_path(self.name)
            return DownloadSpec(path=path, sha1=self.sha1, size=self.size,
                                url=self.url.rstrip("/") + "/" + path)
        return None

    def native_classifier(self, os_name: str, arch_bits: str) -> Optional[DownloadSpec]:
        """The classifier download holding this library's natives for ``os_name``."""
        if not self.downloads or not self.downloads.classifiers:
            return None
        if self.natives:
            if os_name not in self.natives:
                return None
            key = self.natives[os_name].replace("${arch}", arch_bits)
        else:
            key = f"natives-{os_name}"
        spec = self.downloads.classifiers.get(key)
        if spec is None:
            return None
        if spec.path:
            return spec
        return spec.model_copy(update={"path": maven_path(self.name, key)})

    @property
    def excludes(self) -> List[str]:
        if self.extract and self.extract.exclude:
            return list(self.extract.exclude)
        return []


class VersionAssetsUnion(BaseModel):
    id: Optional[str] = None
    sha1: Optional[str] = None
    size: Optional[int] = None
    totalSize: Optional[int] = None
    url: Optional[str] = None


class JavaVersion(BaseModel):
    component: Optional[str] = None
    majorVersion: Optional[int] = None


class LoggingFile(BaseModel):
    id: Optional[str] = None
    sha1: Optional[str] = None
    size: Optional[int] = None
    url: Optional[str] = None


class LoggingConfig(BaseModel):
    argument: Optional[str] = None
    file: Optional[LoggingFile] = None
    type: Optional[str] = None


class RuledArgument(BaseModel):
    rules: List[Rule] = []
    value: Union[str, List[str]] = []


ArgumentEntry = Union[str, RuledArgument]


class VersionArguments(BaseModel):
    game: List[ArgumentEntry] = []
    jvm: List[ArgumentEntry] = []


class ArgumentTemplate(BaseModel):
    """Both historical argument shapes reduced to one value.

    ``legacy`` templates come from the space separated ``minecraftArguments``
    string and carry no JVM tokens (``jvm`` is None).
    """
    kind: Literal["legacy", "structured"]
    game: List[ArgumentEntry] = []
    jvm: Optional[List[ArgumentEntry]] = None


class VersionInfo(BaseModel):
    id: str
    type: str
    url: str
    time: Optional[datetime] = None
    releaseTime: Optional[datetime] = None
    sha1: Optional[str] = None
    complianceLevel: int = 0


class VersionManifest(BaseModel):
    latest: Dict[str, str] = {}
    versions: List[VersionInfo] = []

    def get_version(self, version_id: str) -> Optional[VersionInfo]:
        for version in self.versions:
            if version.id == version_id:
                return version
        return None


class VersionMetadata(BaseModel):
    """Parsed version.json data - flexible for all versions"""
    id: str
    type: Optional[str] = None
    time: Optional[datetime] = None
    releaseTime: Optional[datetime] = None
    inheritsFrom: Optional[str] = None
    minimumLauncherVersion: Optional[int] = None
    downloads: Dict[str, DownloadSpec] = {}
    assetIndex: Optional[VersionAssetsUnion] = None
    assets: Optional[str] = None
    arguments: Optional[VersionArguments] = None
    minecraftArguments: Optional[str] = None
    libraries: List[VersionLibrary] = []
    logging: Dict[str, LoggingConfig] = {}
    mainClass: Optional[str] = None
    javaVersion: Optional[JavaVersion] = None
    jar: Optional[str] = None

    _template: Optional[ArgumentTemplate] = PrivateAttr(default=None)

    def model_post_init(self, __context) -> None:
        self._template = normalize_arguments(self)

    @property
    def argument_template(self) -> ArgumentTemplate:
        return self._template

    @property
    def asset_index_id(self) -> str:
        if self.assetIndex and self.assetIndex.id:
            return self.assetIndex.id
        return self.assets or "legacy"


def normalize_arguments(metadata: VersionMetadata) -> ArgumentTemplate:
    # Structured arguments win when a profile carries both shapes
    if metadata.arguments is not None:
        return ArgumentTemplate(kind="structured", game=list(metadata.arguments.game),
                                jvm=list(metadata.arguments.jvm))
    if metadata.minecraftArguments is not None:
        tokens = [token for token in metadata.minecraftArguments.split(" ") if token]
        return ArgumentTemplate(kind="legacy", game=tokens, jvm=None)
    return ArgumentTemplate(kind="structured", game=[], jvm=[])


class AssetObject(BaseModel):
    hash: str
    size: int = 0


class AssetIndex(BaseModel):
    objects: Dict[str, AssetObject] = {}
    virtual: bool = False
    map_to_resources: bool = False


class ArtifactKind(str, Enum):
    ASSET = "asset"
    LIBRARY = "library"
    NATIVE = "native"
    CLIENT = "client"
    LOGGING = "logging"


class ArtifactRecord(BaseModel):
    """One file that must exist locally with the given SHA1."""
    kind: ArtifactKind
    target: Path
    url: str
    sha1: Optional[str] = None
    size: Optional[int] = None
    essential: bool = False
