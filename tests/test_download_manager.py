"""Tests for the download manager."""

import asyncio
import hashlib

import pytest

from conftest import FakeHTTP
from rostermine.errors import IntegrityError
from rostermine.versions.cache import ContentCache
from rostermine.versions.download_manager import DownloadManager
from rostermine.versions.models import ArtifactKind, ArtifactRecord


def record(tmp_path, name, payload, essential=False, kind=ArtifactKind.LIBRARY):
    return ArtifactRecord(
        kind=kind,
        target=tmp_path / "libraries" / name,
        url=f"https://libraries.example.invalid/{name}",
        sha1=hashlib.sha1(payload).hexdigest(),
        size=len(payload),
        essential=essential,
    )


@pytest.mark.asyncio
async def test_missing_files_are_fetched_and_satisfied_ones_skipped(tmp_path):
    present = record(tmp_path, "present.jar", b"present")
    missing = record(tmp_path, "missing.jar", b"missing")
    present.target.parent.mkdir(parents=True)
    present.target.write_bytes(b"present")

    http = FakeHTTP({present.url: b"present", missing.url: b"missing"})
    report = await DownloadManager(http, concurrent_downloads=2).sync([present, missing])

    assert http.requested == [missing.url]
    assert missing.target.read_bytes() == b"missing"
    assert report.satisfied == [present]
    assert report.downloaded == [missing]
    assert report.ok
    assert report.downloaded_bytes == len(b"missing")


@pytest.mark.asyncio
async def test_second_sync_makes_no_requests(tmp_path):
    records = [record(tmp_path, f"lib{i}.jar", f"lib{i}".encode()) for i in range(4)]
    documents = {r.url: f"lib{i}".encode() for i, r in enumerate(records)}

    await DownloadManager(FakeHTTP(documents)).sync(records)
    http = FakeHTTP(documents)
    report = await DownloadManager(http).sync(records)
    assert http.requested == []
    assert len(report.satisfied) == 4


@pytest.mark.asyncio
async def test_corrupt_payload_is_retried_once_then_reported(tmp_path):
    bad = record(tmp_path, "bad.jar", b"expected")
    http = FakeHTTP({bad.url: b"tampered"})

    report = await DownloadManager(http).sync([bad])

    assert http.requested == [bad.url, bad.url]
    assert not bad.target.exists()
    assert not report.ok
    failed_record, error = report.failed[0]
    assert failed_record is bad
    assert isinstance(error, IntegrityError)


@pytest.mark.asyncio
async def test_optional_failures_do_not_stop_the_run(tmp_path):
    dead = record(tmp_path, "dead.jar", b"dead")
    good = record(tmp_path, "good.jar", b"good")
    http = FakeHTTP({good.url: b"good"})

    report = await DownloadManager(http).sync([dead, good])

    assert good.target.read_bytes() == b"good"
    assert [r for r, _ in report.failed] == [dead]


@pytest.mark.asyncio
async def test_essential_failure_raises(tmp_path):
    client = record(tmp_path, "client.jar", b"client", essential=True, kind=ArtifactKind.CLIENT)
    with pytest.raises(IntegrityError):
        await DownloadManager(FakeHTTP({client.url: b"other"})).sync([client])


@pytest.mark.asyncio
async def test_cancelled_before_start(tmp_path):
    records = [record(tmp_path, "a.jar", b"a"), record(tmp_path, "b.jar", b"b")]
    http = FakeHTTP({r.url: r.target.name[0].encode() for r in records})
    cancel_event = asyncio.Event()
    cancel_event.set()

    with pytest.raises(asyncio.CancelledError):
        await DownloadManager(http).sync(records, cancel_event=cancel_event)
    assert http.requested == []


@pytest.mark.asyncio
async def test_duplicate_targets_are_fetched_once(tmp_path):
    first = record(tmp_path, "shared.jar", b"shared")
    second = first.model_copy()
    http = FakeHTTP({first.url: b"shared"})

    report = await DownloadManager(http).sync([first, second])

    assert http.requested == [first.url]
    assert len(report.downloaded) == 1
    assert len(report.satisfied) == 1


@pytest.mark.asyncio
async def test_progress_callback_counts_records(tmp_path):
    records = [record(tmp_path, f"lib{i}.jar", f"lib{i}".encode()) for i in range(3)]
    http = FakeHTTP({r.url: f"lib{i}".encode() for i, r in enumerate(records)})
    seen = []

    async def progress(rec, done, total):
        seen.append((done, total))

    await DownloadManager(http).sync(records, progress_callback=progress)
    assert sorted(seen) == [(1, 3), (2, 3), (3, 3)]


@pytest.mark.asyncio
async def test_cancelled_mid_run_leaves_only_complete_files(tmp_path):
    records = [record(tmp_path, f"lib{i}.jar", f"lib{i}".encode() * 1000) for i in range(6)]
    cancel_event = asyncio.Event()
    first_done = asyncio.Event()

    class GatedHTTP(FakeHTTP):
        calls = 0

        async def get_bytes(self, url, headers=None):
            # only the first download goes through before the cancel
            self.calls += 1
            if self.calls > 1:
                await first_done.wait()
            return await super().get_bytes(url, headers)

    http = GatedHTTP({r.url: f"lib{i}".encode() * 1000 for i, r in enumerate(records)})

    async def cancel_after_first(rec, done, total):
        cancel_event.set()
        first_done.set()

    with pytest.raises(asyncio.CancelledError):
        await DownloadManager(http, concurrent_downloads=1).sync(
            records, cancel_event=cancel_event, progress_callback=cancel_after_first)

    assert len(http.requested) < len(records)
    assert any(r.target.exists() for r in records)
    for r in records:
        assert not r.target.exists() or ContentCache.is_satisfied(r)
    assert [p.name for p in (tmp_path / "libraries").iterdir() if p.name.endswith(".part")] == []
