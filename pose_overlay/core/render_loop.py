"""Per-display-frame driver: sample, anchor, clear, draw."""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, List, Optional, Protocol

from ..config.settings import DEFAULT_CONFIG, OverlayConfig
from ..visualization.surface import OverlaySurface
from ..visualization.templates import TemplateRenderer
from .anchor import resolve_anchor
from .pose_estimator import PoseSource
from .sampler import ThrottledSampler
from .selection import TemplateSelection
from .types import AnchorRegion, PoseEstimate
from .video_stream import VideoStream

logger = logging.getLogger(__name__)


class LoopState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class FrameHost(Protocol):
    """Host display: waits for the next display frame callback."""

    async def next_frame(self, loop: "RenderLoop") -> None: ...


class RenderLoop:
    """
    Drive the overlay pipeline once per display frame.

    Ticks run one at a time: ``run`` awaits each tick before waiting for the
    next frame, so at most one pose estimate is ever in flight. The
    ``estimating`` flag guards that explicitly for hosts that call ``tick``
    from elsewhere. A sample that completes after ``stop()`` is discarded.
    """

    def __init__(
        self,
        stream: VideoStream,
        pose_source: PoseSource,
        surface: OverlaySurface,
        selection: Optional[TemplateSelection] = None,
        renderer: Optional[TemplateRenderer] = None,
        sampler: Optional[ThrottledSampler] = None,
        config: OverlayConfig = DEFAULT_CONFIG,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.stream = stream
        self.pose_source = pose_source
        self.surface = surface
        self.selection = selection if selection is not None else TemplateSelection()
        self.renderer = renderer if renderer is not None else TemplateRenderer(config.style)
        self.sampler = sampler if sampler is not None else ThrottledSampler(config.sampler.min_interval_s)
        self.config = config
        self.clock = clock

        self.state = LoopState.STOPPED
        self.estimating = False
        self.anchor: Optional[AnchorRegion] = None
        self.template = self.selection.peek()

        # Counters for status display / diagnostics
        self.sample_count = 0
        self.failure_count = 0

    @property
    def running(self) -> bool:
        return self.state is LoopState.RUNNING

    def start(self):
        if self.state is LoopState.STOPPED:
            # A restarted loop samples on its first tick.
            self.sampler.reset()
            logger.debug("Render loop started")
        self.state = LoopState.RUNNING

    def stop(self):
        if self.state is LoopState.RUNNING:
            logger.debug("Render loop stopped")
        self.state = LoopState.STOPPED

    async def tick(self) -> bool:
        """
        Run one render tick.

        Returns:
            True if an overlay was drawn this tick
        """
        if not self.running:
            return False

        self.template = self.selection.current()

        stream = self.stream
        if stream.paused or stream.ended or stream.frame is None or not self.pose_source.ready:
            return False

        if not self.estimating and self.sampler.poll(self.clock()):
            poses = await self._sample(stream.frame)
            if not self.running:
                logger.debug("Discarding pose sample finished after stop")
                return False
            self._apply_sample(poses)

        self.surface.clear()
        if self.anchor is None:
            return False
        return self.renderer.render(self.surface, self.anchor, self.template)

    async def run(self, host: FrameHost):
        """Start and keep ticking, one tick per host frame, until stopped."""
        self.start()
        while self.running:
            await self.tick()
            if not self.running:
                break
            await host.next_frame(self)

    async def _sample(self, frame) -> List[PoseEstimate]:
        self.estimating = True
        self.sample_count += 1
        try:
            return list(await self.pose_source.estimate(frame))
        except Exception as e:
            # Transient: this sample counts as zero poses.
            self.failure_count += 1
            logger.warning("Pose estimation failed: %s", e)
            logger.debug("Pose estimation traceback", exc_info=True)
            return []
        finally:
            self.estimating = False

    def _apply_sample(self, poses: List[PoseEstimate]):
        anchor = resolve_anchor(poses, self.config.anchor)
        if anchor is None and self.config.loop.keep_stale_anchor:
            return
        self.anchor = anchor
