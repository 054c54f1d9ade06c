"""Tests for the content cache check."""

import hashlib

from rostermine.versions.cache import ContentCache
from rostermine.versions.models import ArtifactKind, ArtifactRecord


def record_for(path, sha1):
    return ArtifactRecord(kind=ArtifactKind.LIBRARY, target=path, url="https://example.invalid/x.jar", sha1=sha1)


def test_missing_file_is_not_satisfied(tmp_path):
    sha1 = hashlib.sha1(b"content").hexdigest()
    assert ContentCache.is_satisfied(record_for(tmp_path / "missing.jar", sha1)) is False


def test_wrong_content_is_not_satisfied(tmp_path):
    target = tmp_path / "lib.jar"
    target.write_bytes(b"stale")
    sha1 = hashlib.sha1(b"content").hexdigest()
    assert ContentCache.is_satisfied(record_for(target, sha1)) is False


def test_matching_content_is_satisfied_case_insensitive(tmp_path):
    target = tmp_path / "lib.jar"
    target.write_bytes(b"content")
    sha1 = hashlib.sha1(b"content").hexdigest()
    assert ContentCache.is_satisfied(record_for(target, sha1)) is True
    assert ContentCache.is_satisfied(record_for(target, sha1.upper())) is True


def test_directory_is_not_satisfied(tmp_path):
    sha1 = hashlib.sha1(b"").hexdigest()
    assert ContentCache.is_satisfied(record_for(tmp_path, sha1)) is False


def test_record_without_hash_only_needs_the_file(tmp_path):
    target = tmp_path / "loader.jar"
    assert ContentCache.is_satisfied(record_for(target, None)) is False
    target.write_bytes(b"anything")
    assert ContentCache.is_satisfied(record_for(target, None)) is True
