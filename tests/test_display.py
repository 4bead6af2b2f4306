from __future__ import annotations

import asyncio

import numpy as np
import pytest

from pose_overlay.core.selection import Template, TemplateSelection
from pose_overlay.visualization.display import FramePacer, WindowDisplay
from pose_overlay.visualization.status import StatusRenderer
from pose_overlay.visualization.surface import OverlaySurface


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class SleepRecorder:
    def __init__(self, clock):
        self.clock = clock
        self.sleeps = []

    async def __call__(self, seconds):
        self.sleeps.append(seconds)
        self.clock.now += seconds


class FakeStream:
    def __init__(self):
        self.frame = None
        self.paused = False
        self.ended = False

    def toggle_pause(self):
        self.paused = not self.paused
        return self.paused


class FakeLoop:
    def __init__(self):
        self.stopped = False

    def stop(self):
        self.stopped = True


def test_pacer_waits_for_frame_boundaries():
    clock = FakeClock()
    sleep = SleepRecorder(clock)
    pacer = FramePacer(10.0, clock=clock, sleep=sleep)
    for _ in range(3):
        asyncio.run(pacer.next_frame())
    assert sleep.sleeps == pytest.approx([0.1, 0.1, 0.1])


def test_pacer_skips_missed_frames_without_backlog():
    clock = FakeClock()
    sleep = SleepRecorder(clock)
    pacer = FramePacer(10.0, clock=clock, sleep=sleep)
    asyncio.run(pacer.next_frame())          # wakes at 0.1
    clock.now = 0.35                          # tick overran by 2.5 frames
    asyncio.run(pacer.next_frame())
    asyncio.run(pacer.next_frame())
    assert sleep.sleeps == pytest.approx([0.1, 0.05, 0.1])


def test_pacer_rejects_bad_fps():
    with pytest.raises(ValueError):
        FramePacer(0)


def _display():
    stream = FakeStream()
    selection = TemplateSelection()
    return WindowDisplay(stream, OverlaySurface(10, 10), selection), stream, selection


def test_digit_keys_select_templates():
    display, _, selection = _display()
    loop = FakeLoop()
    display.handle_key(ord("7"), loop)
    assert selection.current() is Template.STAR
    display.handle_key(ord("3"), loop)
    assert selection.current() is Template.LANDING_STRIP
    display.handle_key(ord("0"), loop)
    assert selection.current() is Template.NONE


def test_next_key_cycles():
    display, _, selection = _display()
    display.handle_key(ord("n"), FakeLoop())
    display.handle_key(ord(" "), FakeLoop())
    assert selection.current() is Template.BRAZILIAN


def test_pause_and_quit_keys():
    display, stream, _ = _display()
    loop = FakeLoop()
    display.handle_key(ord("p"), loop)
    assert stream.paused
    assert "paused" in display.status_text()
    display.handle_key(ord("q"), loop)
    assert loop.stopped


def test_status_text_shows_pending_template():
    display, _, selection = _display()
    selection.post("triangle")
    assert display.status_text() == "Template: triangle"


def test_status_line_drawn_in_top_left_corner():
    frame = np.full((200, 300, 3), 255, dtype=np.uint8)
    out = StatusRenderer(bg_alpha=1.0).draw(frame, "Template: star")
    assert out.shape == frame.shape
    assert (out[:100, :150] != 255).any()
    assert (out[150:, :] == 255).all()
    assert (frame == 255).all()


def test_empty_status_text_leaves_frame_alone():
    frame = np.zeros((20, 30, 3), dtype=np.uint8)
    assert StatusRenderer().draw(frame, "") is frame
