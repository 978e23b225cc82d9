"""Tests for background execution of ingestion and search."""

import asyncio
import threading

from bugreport_layer.src.errors import IngestionError
from bugreport_layer.src.ingest import ingest_archive
from bugreport_layer.src.schemas.artifact import ArtifactKind, ArtifactRecord
from bugreport_layer.src.schemas.search import SearchQuery
from bugreport_layer.src.search import search_artifact
from bugreport_layer.utils.background import (
    BackgroundRunner,
    ingest_archive_async,
    search_artifact_async,
)


def make_record() -> ArtifactRecord:
    return ArtifactRecord(
        file_name="bugreport.txt",
        file_size=0,
        relative_path="bugreport.txt",
        original_path="bugreport.txt",
        kind=ArtifactKind.BUGREPORT,
    )


class TestBackgroundRunner:
    """Tests for BackgroundRunner callbacks."""

    def test_on_done_receives_result(self):
        received = []
        done = threading.Event()

        def on_done(value):
            received.append(value)
            done.set()

        with BackgroundRunner() as runner:
            runner.submit(sum, [1, 2, 3], on_done=on_done)

        assert done.wait(timeout=5)
        assert received == [6]

    def test_on_error_receives_exception(self, tmp_path):
        errors = []
        done = threading.Event()

        def on_error(error):
            errors.append(error)
            done.set()

        with BackgroundRunner() as runner:
            runner.submit(
                ingest_archive,
                tmp_path / "missing.zip",
                on_done=lambda _: done.set(),
                on_error=on_error,
            )

        assert done.wait(timeout=5)
        assert len(errors) == 1
        assert isinstance(errors[0], IngestionError)

    def test_failure_without_handler_is_logged(self, caplog):
        def boom():
            raise RuntimeError("boom")

        with BackgroundRunner() as runner:
            future = runner.submit(boom)

        assert isinstance(future.exception(), RuntimeError)
        assert "boom" in caplog.text

    def test_failing_callback_is_logged(self, caplog):
        def on_done(value):
            raise ValueError(f"cannot render {value}")

        with BackgroundRunner() as runner:
            future = runner.submit(sum, [1, 2], on_done=on_done)

        assert future.result() == 3
        records = [r for r in caplog.records if r.name == "bugreport_layer.utils.background"]
        assert any("Callback for background task sum failed" in r.getMessage() for r in records)
        assert any(r.exc_info and isinstance(r.exc_info[1], ValueError) for r in records)

    def test_overlapping_searches_both_deliver(self, tmp_path):
        (tmp_path / "bugreport.txt").write_text("FATAL\nANR\nFATAL\n")
        record = make_record()
        results = {}

        with BackgroundRunner() as runner:
            runner.submit(
                search_artifact, record, tmp_path, SearchQuery(text="FATAL"),
                on_done=lambda r: results.__setitem__("first", r),
            )
            runner.submit(
                search_artifact, record, tmp_path, SearchQuery(text="ANR"),
                on_done=lambda r: results.__setitem__("second", r),
            )

        assert [r.line_number for r in results["first"]] == [1, 3]
        assert [r.line_number for r in results["second"]] == [2]


class TestAsyncHelpers:
    """Tests for the asyncio wrappers."""

    def test_ingest_archive_async(self, make_archive):
        archive = make_archive("bundle.zip", {"bugreport.txt": "hello\n"})

        result = asyncio.run(ingest_archive_async(archive))

        assert result.num_bugreports == 1
        assert result.manifest_path.exists()

    def test_search_artifact_async(self, tmp_path):
        (tmp_path / "bugreport.txt").write_text("one\nFATAL two\n")

        results = asyncio.run(
            search_artifact_async(make_record(), tmp_path, SearchQuery(text="fatal"))
        )

        assert [r.line for r in results] == ["FATAL two"]
