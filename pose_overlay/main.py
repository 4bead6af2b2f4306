"""Pose Overlay - CLI entry point."""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace

from .config.settings import OverlayConfig, load_config, validate_config
from .core.pose_estimator import YoloPoseSource
from .core.render_loop import RenderLoop
from .core.selection import Template, TemplateSelection
from .core.video_stream import CameraStream
from .errors import AcquisitionError, ConfigError
from .visualization.display import WindowDisplay
from .visualization.surface import OverlaySurface
from .visualization.templates import TemplateRenderer


def run_overlay(config: OverlayConfig, template: str = "none"):
    """Acquire camera and model, then run the render loop until quit."""
    print(f"Loading model: {config.model.name}")
    source = YoloPoseSource(config.model.name, device=config.model.device, conf=config.model.conf)
    source.load()
    print(f"  Device: {source.device}")

    print(f"\nStarting camera: {config.camera.source}")
    stream = CameraStream(config.camera.source, config.camera.width, config.camera.height)
    stream.open()
    print(f"  Resolution: {stream.width}x{stream.height}")

    # Surface is sized once, at stream start, to the native resolution.
    surface = OverlaySurface(stream.width, stream.height)
    selection = TemplateSelection(template)
    loop = RenderLoop(
        stream,
        source,
        surface,
        selection=selection,
        renderer=TemplateRenderer(config.style),
        config=config,
    )
    display = WindowDisplay(stream, surface, selection, config.display)

    print(f"\nTemplate: {selection.peek().value}")
    print("Keys: 0-7 select template, n/space next, p pause, q/Esc quit")
    try:
        asyncio.run(loop.run(display))
    finally:
        display.close()
        stream.release()

    print(f"\nPose samples: {loop.sample_count} ({loop.failure_count} failed)")


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Pose Overlay - draw a pattern anchored to the hips on a live camera feed",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pose-overlay --template star
  pose-overlay --source clip.mp4 --template heart --interval 0.1
  pose-overlay --config overlay.json -v
        """
    )

    templates = [t.value for t in Template]
    parser.add_argument("--source", default=None, help="Camera index or video file (default: 0)")
    parser.add_argument("-t", "--template", default="none", choices=templates)
    parser.add_argument("-m", "--model", default=None, help="YOLO pose model")
    parser.add_argument("-d", "--device", default=None, choices=["auto", "cpu", "cuda", "mps"])
    parser.add_argument("-i", "--interval", type=float, default=None, help="Seconds between pose samples")
    parser.add_argument("--fps", type=float, default=None, help="Display frame rate")
    parser.add_argument("--config", default=None, help="JSON config file")
    parser.add_argument(
        "--keep-stale",
        action="store_true",
        help="Keep drawing the last overlay when a pose sample is rejected",
    )
    parser.add_argument("--no-status", action="store_true", help="Hide the status line")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.source is not None:
        config = replace(config, camera=replace(config.camera, source=args.source))
    if args.model is not None:
        config = replace(config, model=replace(config.model, name=args.model))
    if args.device is not None:
        config = replace(config, model=replace(config.model, device=args.device))
    if args.interval is not None:
        config = replace(config, sampler=replace(config.sampler, min_interval_s=args.interval))
    if args.fps is not None:
        config = replace(config, display=replace(config.display, fps=args.fps))
    if args.keep_stale:
        config = replace(config, loop=replace(config.loop, keep_stale_anchor=True))
    if args.no_status:
        config = replace(config, display=replace(config.display, show_status=False))

    try:
        validate_config(config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        run_overlay(config, template=args.template)
    except AcquisitionError as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
