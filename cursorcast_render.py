"""
Cursorcast Render
Command line entry point: render, plan and record
"""

import argparse
import json
import logging
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import List, Optional

from cursorcast import (
    CancelledError,
    ConfigManager,
    CursorcastError,
    Dimensions,
    RecordingRegion,
    RenderPipeline,
    TelemetryRecorder,
    load_events,
    load_metadata,
    save_events,
)

logger = logging.getLogger("cursorcast_render")


def _dimensions(value: str) -> Dimensions:
    try:
        width, height = value.lower().split('x')
        return Dimensions(float(width), float(height))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got '{value}'")


def _region(value: str) -> RecordingRegion:
    try:
        x, y, width, height = (float(v) for v in value.split(','))
        return RecordingRegion(x, y, width, height)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected X,Y,WIDTH,HEIGHT, got '{value}'")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="cursorcast", description="Render cursor and zoom effects onto screen recordings")
    ap.add_argument("--config", default=None, help="Path to JSON config (default: ./cursorcast.json)")
    ap.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render a recording with its telemetry")
    render.add_argument("--video", required=True, help="Source screen recording")
    source = render.add_mutually_exclusive_group()
    source.add_argument("--telemetry", help="Raw telemetry JSON")
    source.add_argument("--metadata", help="Metadata JSON from a previous render")
    render.add_argument("--out", required=True, help="Output video path")
    render.add_argument("--screen", type=_dimensions, help="Logical screen size WIDTHxHEIGHT")
    render.add_argument("--region", type=_region, help="Recorded region X,Y,WIDTH,HEIGHT in screen points")
    render.add_argument("--fps", type=float, help="Override output frame rate (metadata renders keep their saved rate)")
    render.add_argument("--zoom", action="store_true", help="Enable zoom-follow (metadata renders keep their saved zoom)")

    plan = sub.add_parser("plan", help="Dump the per-frame render plan as JSON")
    plan.add_argument("--video", required=True)
    plan.add_argument("--telemetry", required=True)
    plan.add_argument("--out", default="-", help="Output JSON path, '-' for stdout")
    plan.add_argument("--screen", type=_dimensions)
    plan.add_argument("--region", type=_region)

    record = sub.add_parser("record", help="Record pointer telemetry until Ctrl-C")
    record.add_argument("--out", required=True, help="Telemetry JSON path")
    record.add_argument("--rate", type=float, default=250.0, help="Samples per second")
    return ap


def _load_config(args):
    config = ConfigManager(args.config).load()
    render = config.render
    if args.debug:
        render = replace(render, debug_logging=True)
    if getattr(args, "fps", None):
        render = replace(render, frame_rate=args.fps)
    zoom = config.zoom
    if getattr(args, "zoom", False):
        zoom = replace(zoom, enabled=True)
    return replace(config, render=render, zoom=zoom)


def _print_progress(done: int, total: int):
    print(f"\rRendering {done}/{total} frames", end="", file=sys.stderr, flush=True)
    if done == total:
        print(file=sys.stderr)


def cmd_render(args, config) -> int:
    pipeline = RenderPipeline(config, progress=_print_progress)
    if args.metadata:
        metadata = load_metadata(args.metadata)
        job = lambda: pipeline.render_metadata(args.video, args.out, metadata)
    else:
        events = load_events(args.telemetry) if args.telemetry else []
        job = lambda: pipeline.render(args.video, args.out, events, args.screen, args.region)

    # Render on a worker thread so Ctrl-C can cancel between batches
    with ThreadPoolExecutor(max_workers=1) as pool:
        future = pool.submit(job)
        try:
            result = future.result()
        except KeyboardInterrupt:
            pipeline.cancel()
            result = future.result()
    print(result.output_path)
    return 0


def cmd_plan(args, config) -> int:
    pipeline = RenderPipeline(config)
    plan = pipeline.plan(args.video, load_events(args.telemetry), args.screen, args.region)
    document = {
        'video': plan.video.to_dict(),
        'frameRate': plan.frame_rate,
        'frames': [spec.to_dict() for spec in plan.frames()],
    }
    if args.out == "-":
        json.dump(document, sys.stdout, indent=2)
        print()
    else:
        with open(args.out, 'w', encoding='utf-8') as f:
            json.dump(document, f, indent=2)
        logger.info("Wrote plan for %d frames to %s", len(plan), args.out)
    return 0


def cmd_record(args, config) -> int:
    recorder = TelemetryRecorder(sample_rate_hz=args.rate)
    recorder.start()
    print("Recording pointer telemetry, press Ctrl-C to stop", file=sys.stderr)
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        pass
    events = recorder.stop()
    save_events(events, args.out)
    print(args.out)
    return 0


COMMANDS = {
    'render': cmd_render,
    'plan': cmd_plan,
    'record': cmd_record,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        config = _load_config(args)
        if config.render.debug_logging:
            logging.getLogger().setLevel(logging.DEBUG)
        return COMMANDS[args.command](args, config)
    except CancelledError as e:
        logger.warning("%s", e)
        return 130
    except CursorcastError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
