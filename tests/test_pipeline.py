"""Tests for the render producer and its job state."""

import time

import pytest

from copyright_sheet.errors import PipeClosedError, RenderError
from copyright_sheet.pipeline import RenderJob, RenderState, start_render

from conftest import FailingCanvas, RecordingCanvas, make_block


class TestRenderJob:

    def test_starts_idle(self):
        job = RenderJob()

        assert job.state is RenderState.IDLE
        assert not job.finished

    def test_finish_ok(self):
        job = RenderJob()
        job.finish()

        assert job.state is RenderState.DONE
        assert job.error is None
        assert job.join(0)

    def test_finish_with_error(self):
        job = RenderJob()
        error = RenderError("x")
        job.finish(error)

        assert job.state is RenderState.FAILED
        assert job.error is error


class TestStartRender:

    def test_streams_serialized_document(self, options):
        canvases = []

        def factory(opts):
            canvases.append(RecordingCanvas(opts, output=b"%PDF-1.4 three cards"))
            return canvases[-1]

        blocks = [make_block("A"), make_block("B"), make_block("C")]
        job = start_render(blocks, {}, options, canvas_factory=factory)

        assert job.reader.read() == b"%PDF-1.4 three cards"
        assert job.join(2)
        assert job.state is RenderState.DONE
        assert len(canvases[0].of_kind("rect")) == 3

    def test_serialize_failure_reaches_reader(self, options):
        job = start_render([make_block("A")], {}, options, canvas_factory=FailingCanvas)

        with pytest.raises(RenderError, match="disk on fire"):
            job.reader.read()
        assert job.join(2)
        assert job.state is RenderState.FAILED

    def test_unexpected_error_is_wrapped(self, options):
        def factory(opts):
            raise ValueError("bad canvas")

        job = start_render([make_block("A")], {}, options, canvas_factory=factory)

        with pytest.raises(RenderError) as excinfo:
            job.reader.read()
        assert isinstance(excinfo.value.__cause__, ValueError)
        assert job.join(2)
        assert job.error is excinfo.value

    def test_duplicate_codes_fail_the_stream(self, options):
        job = start_render([make_block("A"), make_block("A")], {}, options, canvas_factory=RecordingCanvas)

        with pytest.raises(Exception, match="duplicate"):
            job.reader.read()
        assert job.join(2)
        assert job.state is RenderState.FAILED

    def test_consumer_close_aborts_producer(self, options):
        def factory(opts):
            return RecordingCanvas(opts, output=b"x" * (1024 * 1024))

        job = start_render([make_block("A")], {}, options, canvas_factory=factory, max_chunks=1)

        assert job.reader.read(10) == b"x" * 10
        job.reader.close()

        assert job.join(2)
        assert job.state is RenderState.FAILED
        assert isinstance(job.error, PipeClosedError)

    def test_producer_waits_for_consumer(self, options):
        def factory(opts):
            return RecordingCanvas(opts, output=b"y" * (4 * 64 * 1024))

        job = start_render([make_block("A")], {}, options, canvas_factory=factory, max_chunks=1)

        time.sleep(0.2)
        assert not job.finished
        assert job.state is RenderState.STREAMING

        assert len(job.reader.read()) == 4 * 64 * 1024
        assert job.join(2)
        assert job.state is RenderState.DONE
