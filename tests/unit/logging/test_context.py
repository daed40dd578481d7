"""Unit tests for logging context module."""

import logging
import threading
from pathlib import Path

from vshrink.logging.context import (
    WorkerContextFilter,
    get_worker_context,
    worker_context,
)


def make_record() -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)


class TestWorkerContext:
    def test_context_is_set_inside_block(self) -> None:
        with worker_context("01", "F001", Path("/media/movie.mkv")) as context:
            assert get_worker_context() == context
            assert context.file_path == "/media/movie.mkv"
        assert get_worker_context() is None

    def test_nested_context_restores_outer(self) -> None:
        with worker_context("01", "F001"):
            with worker_context("02", "F002"):
                assert get_worker_context().worker_id == "02"
            assert get_worker_context().worker_id == "01"

    def test_reset_after_exception(self) -> None:
        try:
            with worker_context("01"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert get_worker_context() is None

    def test_tag_formats(self) -> None:
        with worker_context("03", "F012") as context:
            assert context.tag == "[W03:F012] "
        with worker_context("03") as context:
            assert context.tag == "[W03] "

    def test_threads_see_their_own_context(self) -> None:
        seen: dict[str, str | None] = {}
        barrier = threading.Barrier(2)

        def work(worker_id: str) -> None:
            with worker_context(worker_id, f"F{worker_id}"):
                barrier.wait(timeout=5)
                seen[worker_id] = get_worker_context().file_id

        threads = [threading.Thread(target=work, args=(w,)) for w in ("01", "02")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert seen == {"01": "F01", "02": "F02"}


class TestWorkerContextFilter:
    def test_adds_fields_inside_context(self) -> None:
        record = make_record()
        with worker_context("01", "F001", "/media/movie.mkv"):
            assert WorkerContextFilter().filter(record) is True

        assert record.worker_id == "01"
        assert record.file_id == "F001"
        assert record.file_path == "/media/movie.mkv"
        assert record.worker_tag == "[W01:F001] "

    def test_empty_tag_outside_context(self) -> None:
        record = make_record()
        assert WorkerContextFilter().filter(record) is True
        assert record.worker_tag == ""
        assert record.worker_id is None
