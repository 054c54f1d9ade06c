"""Version manifest and metadata manager."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from ..config import DataLayout, MANIFEST_URL
from ..errors import IntegrityError, MalformedManifest, NetworkError, UnresolvedVersion
from ..utils.async_http import AsyncHTTPClient
from ..utils.files import bytes_sha1, persist
from .cache import hash_matches
from .models import AssetIndex, VersionInfo, VersionManifest, VersionMetadata

logger = logging.getLogger(__name__)

RELEASE_CHANNEL = "release"


def decode_document(data: bytes, source: object) -> str:
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise MalformedManifest(f"{source} is not UTF-8 text: {e}") from e


def parse_document(text: str, model: Type[BaseModel], source: object) -> Dict[str, Any]:
    """Decode JSON text and check it fits ``model``. Returns the raw mapping."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedManifest(f"{source} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedManifest(f"{source} is not a JSON object")
    try:
        model(**data)
    except (ValidationError, TypeError) as e:
        raise MalformedManifest(f"{source} does not look like a {model.__name__}: {e}") from e
    return data


def merge_manifests(target: Dict[str, Any], base: Dict[str, Any]) -> Dict[str, Any]:
    """Merges a version profile onto the version it inherits from."""
    logger.info(f"Merging {target.get('id')} onto {base.get('id')}")

    libraries: Dict[str, Any] = {}
    for lib in (base.get('libraries') or []) + (target.get('libraries') or []):
        if 'name' in lib:
            libraries[lib['name']] = lib

    merged = dict(base)
    merged.update({k: v for k, v in target.items() if v is not None})
    merged['libraries'] = list(libraries.values())
    merged['downloads'] = {**(base.get('downloads') or {}), **(target.get('downloads') or {})}

    base_args = base.get('arguments') or {}
    target_args = target.get('arguments') or {}
    if base_args or target_args:
        merged['arguments'] = {
            "game": (base_args.get('game') or []) + (target_args.get('game') or []),
            "jvm": (base_args.get('jvm') or []) + (target_args.get('jvm') or []),
        }
    merged.pop('inheritsFrom', None)
    return merged


class VersionManager:
    """Resolves version ids to version packages, keeping copies on disk.

    Every document is fetched through :meth:`retrieve_text`, which skips the
    network when the cached copy already has the expected SHA1 and falls back
    to the cached copy when the network is unavailable.
    """

    MANIFEST_URL = MANIFEST_URL

    def __init__(self, layout: DataLayout, http: Optional[AsyncHTTPClient] = None,
                 manifest_url: Optional[str] = None):
        self.layout = layout
        self.http = http or AsyncHTTPClient()
        self._owns_http = http is None
        self.manifest_url = manifest_url or self.MANIFEST_URL
        self._manifest: Optional[VersionManifest] = None
        self._manifest_loaded = False

    async def __aenter__(self):
        if self._owns_http:
            await self.http.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self._owns_http:
            await self.http.close()

    async def retrieve_text(self, path: Path, url: Optional[str], sha1: Optional[str] = None,
                            model: Optional[Type[BaseModel]] = None) -> str:
        """Hash-gated retrieval of a text document.

        Returns the cached copy when its SHA1 matches ``sha1``. Otherwise
        fetches ``url``, checks it (hash and ``model`` shape), saves it and
        returns it. Any failure on the remote side falls back to the cached
        copy, if there is one.
        """
        path = Path(path)
        if sha1 and hash_matches(path, sha1):
            logger.debug(f"Satisfied: {path}")
            return self._read_local(path)

        if url:
            try:
                data = await self.http.get_bytes(url)
                if sha1 and bytes_sha1(data).lower() != sha1.lower():
                    raise IntegrityError(url, sha1, bytes_sha1(data))
                text = decode_document(data, url)
                if model is not None:
                    parse_document(text, model, url)
            except (NetworkError, IntegrityError, MalformedManifest) as e:
                if not path.is_file():
                    if isinstance(e, NetworkError):
                        raise UnresolvedVersion(f"Could not fetch {url} and no cached copy at {path}") from e
                    raise
                logger.warning(f"{e}; using cached {path}")
                return self._read_local(path)
            persist(path, data)
            logger.debug(f"Saved {url} to {path}")
            return text

        if not path.is_file():
            raise UnresolvedVersion(f"No cached copy at {path}")
        return self._read_local(path)

    @staticmethod
    def _read_local(path: Path) -> str:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except UnicodeDecodeError as e:
            raise MalformedManifest(f"{path} is not UTF-8 text: {e}") from e
        except OSError as e:
            raise UnresolvedVersion(f"Could not read {path}: {e}") from e

    async def fetch_manifest(self) -> Optional[VersionManifest]:
        """Fetch the launcher version manifest, or None when working offline."""
        if self._manifest_loaded:
            return self._manifest
        self._manifest_loaded = True
        try:
            text = await self.retrieve_text(self.layout.manifest_path, self.manifest_url,
                                            model=VersionManifest)
            self._manifest = VersionManifest(**parse_document(text, VersionManifest, self.layout.manifest_path))
        except (UnresolvedVersion, MalformedManifest) as e:
            logger.warning(f"Version manifest unavailable ({e}); working offline")
            self._manifest = None
        return self._manifest

    async def get_version_info(self, version_id: str, manifest: Optional[VersionManifest] = None) -> Optional[VersionInfo]:
        """Get version info for a version id or channel alias."""
        if not manifest:
            manifest = await self.fetch_manifest()
        if not manifest:
            return None

        target = manifest.latest.get(version_id, version_id)
        return manifest.get_version(target)

    async def list_versions(self, kind: Optional[str] = None) -> List[VersionInfo]:
        manifest = await self.fetch_manifest()
        if not manifest:
            return []
        return [v for v in manifest.versions if kind is None or v.type == kind]

    async def fetch_version_metadata(self, version_info: VersionInfo) -> Dict[str, Any]:
        """Fetch version.json for a specific version, reusing the cached copy when current."""
        path = self.layout.version_json(version_info.id)
        text = await self.retrieve_text(path, version_info.url, version_info.sha1, model=VersionMetadata)
        return parse_document(text, VersionMetadata, path)

    def _read_cached_metadata(self, version_id: str) -> Dict[str, Any]:
        path = self.layout.version_json(version_id)
        if not path.is_file():
            raise UnresolvedVersion(f"Version {version_id} is not installed and cannot be fetched")
        return parse_document(self._read_local(path), VersionMetadata, path)

    async def _fetch_document(self, version_id: str, fallback: bool) -> Dict[str, Any]:
        manifest = await self.fetch_manifest()
        if manifest is None:
            return self._read_cached_metadata(version_id)

        info = await self.get_version_info(version_id, manifest)
        if info is not None:
            return await self.fetch_version_metadata(info)

        # Profiles installed by hand (mod loaders) are not in the manifest
        if self.layout.version_json(version_id).is_file():
            return self._read_cached_metadata(version_id)

        if not fallback or version_id == RELEASE_CHANNEL:
            raise UnresolvedVersion(f"Unknown version {version_id}")

        logger.warning(f"Unknown version {version_id}, falling back to the latest release")
        return await self._fetch_document(RELEASE_CHANNEL, fallback=False)

    async def _resolve_document(self, version_id: str, fallback: bool = True,
                                seen: Tuple[str, ...] = ()) -> Dict[str, Any]:
        data = await self._fetch_document(version_id, fallback)
        parent_id = data.get('inheritsFrom')
        if parent_id:
            chain = seen + (data.get('id', version_id),)
            if parent_id in chain:
                raise MalformedManifest(f"Version {version_id} inherits from itself via {' -> '.join(chain)}")
            parent = await self._resolve_document(parent_id, fallback=False, seen=chain)
            data = merge_manifests(data, parent)
        return data

    async def resolve(self, version_id: str) -> VersionMetadata:
        """Resolve a version id or channel alias into its full version package."""
        data = await self._resolve_document(version_id)
        metadata = VersionMetadata(**data)
        logger.info(f"Resolved {version_id} to {metadata.id}")
        return metadata

    async def resolve_asset_index(self, metadata: VersionMetadata) -> AssetIndex:
        """Fetch the asset index a version refers to."""
        ref = metadata.assetIndex
        index_id = metadata.asset_index_id
        path = self.layout.asset_index(index_id)
        if ref is None or not ref.url:
            if not path.is_file():
                logger.warning(f"Version {metadata.id} has no asset index")
                return AssetIndex()
            url, sha1 = None, None
        else:
            url, sha1 = ref.url, ref.sha1

        text = await self.retrieve_text(path, url, sha1, model=AssetIndex)
        return AssetIndex(**parse_document(text, AssetIndex, path))
