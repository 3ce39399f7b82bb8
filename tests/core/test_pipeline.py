"""Tests for the transformation pipeline."""

from concurrent.futures import Future

import pytest

from iCrop.core.pipeline import TransformationPipeline
from iCrop.core.raster import DeferredRasterDecoder
from iCrop.core.transformations import CropTransformation, RotateTransformation, Transformation
from iCrop.errors import PipelineBusyError, RasterDecodeError


class _Recorder:
    def __init__(self, pipeline):
        self.events = []
        pipeline.transformation_applied.connect(lambda: self.events.append("applied"))
        pipeline.reinitialized.connect(lambda: self.events.append("reinitialized"))
        pipeline.refreshed.connect(lambda: self.events.append("refreshed"))
        pipeline.failed.connect(lambda exc: self.events.append(("failed", type(exc))))


class _Exploding(Transformation):
    kind = "explode"

    def apply(self, raster, future):
        raise RuntimeError("boom")


def test_refresh_derives_working_from_source(make_raster):
    pipeline = TransformationPipeline(make_raster(40, 30))
    assert pipeline.working is None

    pipeline.refresh().result()

    assert pipeline.working is not None
    assert pipeline.working is not pipeline.source
    assert pipeline.working.equivalent(pipeline.source)


def test_refresh_applies_layout(make_raster):
    pipeline = TransformationPipeline(
        make_raster(40, 30),
        layout=lambda raster: raster.placed(3, 4, 0.5),
    )
    pipeline.refresh()
    assert pipeline.working.bounds().left == 3
    assert pipeline.working.scale_x == 0.5


def test_append_replaces_source_and_signals(make_raster):
    pipeline = TransformationPipeline(make_raster(40, 30))
    recorder = _Recorder(pipeline)

    result = pipeline.append(CropTransformation(0, 0, 0.5, 0.5)).result()

    assert result is pipeline.source
    assert pipeline.source.image.size == (20, 15)
    assert pipeline.working.image.size == (20, 15)
    assert pipeline.transformations == (CropTransformation(0, 0, 0.5, 0.5),)
    assert recorder.events == ["refreshed", "applied"]
    assert not pipeline.is_busy


def test_signal_fires_after_state_mutation(make_raster):
    pipeline = TransformationPipeline(make_raster(40, 30))
    seen = []
    pipeline.transformation_applied.connect(
        lambda: seen.append((pipeline.source.image.size, pipeline.is_busy))
    )
    pipeline.append(CropTransformation(0, 0, 0.5, 0.5))
    assert seen == [((20, 15), False)]


def test_append_refused_while_busy(make_raster):
    decoder = DeferredRasterDecoder()
    pipeline = TransformationPipeline(make_raster(40, 30, decoder=decoder))
    first = pipeline.append(CropTransformation(0, 0, 0.5, 0.5))
    assert pipeline.is_busy

    with pytest.raises(PipelineBusyError):
        pipeline.append(RotateTransformation(90))
    with pytest.raises(PipelineBusyError):
        pipeline.refresh()

    decoder.run_pending()
    assert first.done()
    assert not pipeline.is_busy
    assert len(pipeline.transformations) == 1


def test_next_transformation_waits_for_previous(make_raster):
    """Nothing after step N starts before step N's continuation fired."""
    decoder = DeferredRasterDecoder()
    pipeline = TransformationPipeline(make_raster(40, 30, decoder=decoder))
    pipeline.append(CropTransformation(0, 0, 0.5, 0.5))
    # Crop decode is pending; the refresh has not been scheduled yet.
    assert decoder.pending_count == 1
    decoder.run_next()
    # Now the refresh decode is pending.
    assert decoder.pending_count == 1
    assert pipeline.is_busy
    decoder.run_next()
    assert not pipeline.is_busy


def test_reinitialize_on_empty_list_just_refreshes(make_raster):
    original = make_raster(40, 30)
    pipeline = TransformationPipeline(original)
    recorder = _Recorder(pipeline)

    result = pipeline.reinitialize().result()

    assert result is original
    assert recorder.events == ["reinitialized", "refreshed"]


def test_replay_reproduces_incremental_result(make_raster):
    steps = [
        CropTransformation(0.1, 0.1, 0.8, 0.8),
        RotateTransformation(90),
        CropTransformation(0.0, 0.25, 1.0, 0.5),
        RotateTransformation(-180),
    ]
    pipeline = TransformationPipeline(make_raster(40, 30))
    for step in steps:
        pipeline.append(step).result()
    incremental = pipeline.source

    replayed = pipeline.reinitialize().result()

    assert replayed is not incremental
    assert replayed.equivalent(incremental)
    assert pipeline.transformations == tuple(steps)


@pytest.mark.parametrize(
    "step",
    [RotateTransformation(90), CropTransformation(0, 0, 1, 1)],
    ids=["rotate", "crop"],
)
def test_long_replay_with_synchronous_decoder_completes(make_raster, step):
    pipeline = TransformationPipeline(make_raster(40, 30))
    for _ in range(500):
        pipeline.append(step).result(timeout=0)
    incremental = pipeline.source

    future = pipeline.reinitialize()

    assert future.done()
    assert not pipeline.is_busy
    assert future.result(timeout=0).equivalent(incremental)
    assert len(pipeline.transformations) == 500
    pipeline.append(RotateTransformation(90)).result(timeout=0)


def test_layout_error_fails_future_and_clears_busy(make_raster):
    def broken_layout(raster):
        raise ValueError("no canvas")

    pipeline = TransformationPipeline(make_raster(40, 30), layout=broken_layout)
    failures = []
    pipeline.failed.connect(failures.append)

    future = pipeline.refresh()

    assert isinstance(future.exception(timeout=0), ValueError)
    assert not pipeline.is_busy
    assert [type(exc) for exc in failures] == [ValueError]


def test_reinitialize_while_busy_is_queued(make_raster):
    decoder = DeferredRasterDecoder()
    pipeline = TransformationPipeline(make_raster(40, 30, decoder=decoder))
    recorder = _Recorder(pipeline)
    appended = pipeline.append(CropTransformation(0, 0, 0.5, 0.5))

    queued = pipeline.reinitialize()
    assert pipeline.queued_reinitialize_count == 1
    assert not queued.done()

    decoder.run_pending()

    assert appended.done() and queued.done()
    assert pipeline.queued_reinitialize_count == 0
    assert queued.result().image.size == (20, 15)
    assert recorder.events == ["refreshed", "applied", "reinitialized", "refreshed"]


def test_decode_failure_propagates_and_drops_step(make_raster):
    decoder = DeferredRasterDecoder()
    pipeline = TransformationPipeline(make_raster(40, 30, decoder=decoder))
    recorder = _Recorder(pipeline)
    original = pipeline.source

    future = pipeline.append(CropTransformation(0, 0, 0.5, 0.5))
    decoder.fail_next()

    assert isinstance(future.exception(), RasterDecodeError)
    assert pipeline.transformations == ()
    assert pipeline.source is original
    assert not pipeline.is_busy
    assert recorder.events == [("failed", RasterDecodeError)]


def test_apply_exception_is_reported_through_future(make_raster):
    pipeline = TransformationPipeline(make_raster(40, 30))
    future = pipeline.append(_Exploding())
    assert isinstance(future.exception(), RuntimeError)
    assert pipeline.transformations == ()
    assert not pipeline.is_busy


def test_replay_failure_truncates_list(make_raster):
    decoder = DeferredRasterDecoder()
    pipeline = TransformationPipeline(make_raster(40, 30, decoder=decoder))
    for step in (CropTransformation(0, 0, 0.5, 0.5), RotateTransformation(90)):
        pipeline.append(step)
        decoder.run_pending()

    future = pipeline.reinitialize()
    decoder.fail_next()
    decoder.run_pending()

    assert isinstance(future.exception(), RasterDecodeError)
    assert pipeline.transformations == ()
    assert pipeline.source.image.size == (40, 30)
    assert pipeline.working is not None


def test_degenerate_crop_keeps_source(make_raster):
    pipeline = TransformationPipeline(make_raster(40, 30))
    original = pipeline.source
    result = pipeline.append(CropTransformation(0, 0, 0.001, 0.001)).result()
    assert result is original
    assert not pipeline.is_busy


def test_returned_futures_are_concurrent_futures(make_raster):
    pipeline = TransformationPipeline(make_raster(40, 30))
    assert isinstance(pipeline.refresh(), Future)
