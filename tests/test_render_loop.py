"""Render loop tests driven with fake stream / pose source / clock."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace

import numpy as np
import pytest

from pose_overlay.config.settings import DEFAULT_CONFIG, LoopConfig
from pose_overlay.core.render_loop import LoopState, RenderLoop
from pose_overlay.core.selection import Template, TemplateSelection
from pose_overlay.errors import EstimationError
from pose_overlay.visualization.surface import OverlaySurface


class FakeStream:
    def __init__(self):
        self.frame = np.zeros((240, 320, 3), dtype=np.uint8)
        self.paused = False
        self.ended = False
        self.width = 320
        self.height = 240


class FakeSource:
    """Returns queued results in order; exceptions in the queue are raised."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0
        self.ready = True

    async def estimate(self, frame):
        self.calls += 1
        result = self.results.pop(0) if self.results else []
        if isinstance(result, Exception):
            raise result
        return result


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _loop(source, template="star", config=DEFAULT_CONFIG, clock=None):
    loop = RenderLoop(
        FakeStream(),
        source,
        OverlaySurface(320, 240),
        selection=TemplateSelection(template),
        config=config,
        clock=clock or FakeClock(),
    )
    loop.start()
    return loop


def _tick(loop):
    return asyncio.run(loop.tick())


def test_initial_state_is_stopped():
    loop = RenderLoop(FakeStream(), FakeSource(), OverlaySurface(10, 10))
    assert loop.state is LoopState.STOPPED
    assert not _tick(loop)


def test_start_stop_transitions():
    loop = RenderLoop(FakeStream(), FakeSource(), OverlaySurface(10, 10))
    loop.start()
    assert loop.running
    loop.stop()
    assert loop.state is LoopState.STOPPED


def test_star_scenario_draws_at_anchor(pose_factory):
    loop = _loop(FakeSource([pose_factory()]))
    assert _tick(loop)
    assert loop.anchor.center_x == 120.0
    assert loop.anchor.center_y == pytest.approx(213.33, abs=0.01)
    assert loop.surface.alpha[213, 120] > 0.99


def test_empty_poses_clear_surface_and_draw_nothing():
    loop = _loop(FakeSource([]))
    loop.surface.fill_rect(0, 0, 320, 240)
    assert not _tick(loop)
    assert loop.anchor is None
    assert loop.surface.is_blank()


def test_estimation_failure_is_contained(pose_factory, caplog):
    clock = FakeClock()
    loop = _loop(FakeSource(EstimationError("model exploded"), [pose_factory()]), clock=clock)

    with caplog.at_level(logging.WARNING, logger="pose_overlay.core.render_loop"):
        assert not _tick(loop)
    assert "model exploded" in caplog.text
    assert loop.failure_count == 1
    assert not loop.estimating

    clock.now = 0.25
    assert _tick(loop)
    assert loop.sample_count == 2


def test_unexpected_error_is_contained():
    loop = _loop(FakeSource(RuntimeError("boom")))
    assert not _tick(loop)
    assert loop.running
    assert loop.failure_count == 1


def test_throttled_ticks_reuse_anchor(pose_factory):
    clock = FakeClock()
    source = FakeSource([pose_factory()], [])
    loop = _loop(source, clock=clock)

    drawn = []
    for t in (0.0, 0.05, 0.12, 0.19):
        clock.now = t
        drawn.append(_tick(loop))
    assert source.calls == 1
    assert drawn == [True, True, True, True]

    clock.now = 0.21
    assert not _tick(loop)
    assert source.calls == 2


def test_restart_samples_on_first_tick(pose_factory):
    clock = FakeClock()
    source = FakeSource([pose_factory()], [pose_factory()])
    loop = _loop(source, clock=clock)
    assert _tick(loop)

    loop.stop()
    loop.start()
    clock.now = 0.05
    assert _tick(loop)
    assert source.calls == 2


def test_start_while_running_keeps_throttle(pose_factory):
    clock = FakeClock()
    source = FakeSource([pose_factory()], [pose_factory()])
    loop = _loop(source, clock=clock)
    assert _tick(loop)

    loop.start()
    clock.now = 0.05
    _tick(loop)
    assert source.calls == 1


def test_rejected_sample_clears_anchor_by_default(pose_factory):
    clock = FakeClock()
    loop = _loop(FakeSource([pose_factory()], [pose_factory(score=0.3)]), clock=clock)
    assert _tick(loop)
    clock.now = 1.0
    assert not _tick(loop)
    assert loop.anchor is None
    assert loop.surface.is_blank()


def test_keep_stale_anchor_option(pose_factory):
    clock = FakeClock()
    config = replace(DEFAULT_CONFIG, loop=LoopConfig(keep_stale_anchor=True))
    loop = _loop(FakeSource([pose_factory()], []), config=config, clock=clock)
    assert _tick(loop)
    first = loop.anchor
    clock.now = 1.0
    assert _tick(loop)
    assert loop.anchor == first


@pytest.mark.parametrize("attr", ["paused", "ended"])
def test_paused_or_ended_stream_skips_tick(pose_factory, attr):
    source = FakeSource([pose_factory()])
    loop = _loop(source)
    loop.surface.fill_rect(0, 0, 5, 5)
    setattr(loop.stream, attr, True)
    assert not _tick(loop)
    assert source.calls == 0
    assert not loop.surface.is_blank()


def test_source_not_ready_skips_tick(pose_factory):
    source = FakeSource([pose_factory()])
    source.ready = False
    loop = _loop(source)
    assert not _tick(loop)
    assert source.calls == 0


def test_no_overlapping_estimates(pose_factory):
    source = FakeSource([pose_factory()])
    loop = _loop(source)
    loop.estimating = True
    _tick(loop)
    assert source.calls == 0


def test_sample_finishing_after_stop_is_discarded(pose_factory):
    class StoppingSource(FakeSource):
        async def estimate(self, frame):
            loop.stop()
            return await super().estimate(frame)

    loop = _loop(StoppingSource([pose_factory()]))
    assert not _tick(loop)
    assert loop.anchor is None
    assert loop.surface.is_blank()
    assert not loop.estimating


def test_template_change_applies_on_next_tick(pose_factory):
    clock = FakeClock()
    loop = _loop(FakeSource([pose_factory()]), template="none", clock=clock)
    assert not _tick(loop)
    assert loop.anchor is not None

    loop.selection.post("heart")
    clock.now = 0.05
    assert _tick(loop)
    assert loop.template is Template.HEART


def test_run_ticks_once_per_host_frame(pose_factory):
    class CountingHost:
        def __init__(self, frames):
            self.frames = frames
            self.calls = 0

        async def next_frame(self, loop):
            self.calls += 1
            if self.calls >= self.frames:
                loop.stop()

    source = FakeSource([pose_factory()])
    loop = RenderLoop(FakeStream(), source, OverlaySurface(320, 240), clock=FakeClock())
    host = CountingHost(3)
    asyncio.run(loop.run(host))
    assert host.calls == 3
    assert source.calls == 1
    assert loop.state is LoopState.STOPPED
