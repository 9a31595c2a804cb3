"""
CLI entry point for pixelmorph.

Usage:
    pixelmorph <source> <target> [options]
    python -m pixelmorph <source> <target> [options]
"""

import argparse
import sys
import time
from pathlib import Path

from pixelmorph.config import OUTPUT_FORMATS, PixelmorphConfig, load_config
from pixelmorph.errors import PixelmorphError
from pixelmorph.io.images import estimate_processing_time, flatten
from pixelmorph.pipeline import MorphPipeline


def _progress_bar(current: int, total: int, width: int = 30):
    """Report frame-export progress: a live bar on a tty, every 10% otherwise."""
    total = max(total, 1)
    done = int(width * current / total)
    line = f"Frames [{'=' * done}{' ' * (width - done)}] {current}/{total}"
    if sys.stdout.isatty():
        end = "\n" if current >= total else ""
        print(f"\r{line}", end=end, flush=True)
    elif current >= total or current % max(1, total // 10) == 0:
        print(line, flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixelmorph",
        description="Rearrange the pixels of one image into the shape of another by brightness rank",
    )

    parser.add_argument("source", type=Path, help="Image whose pixels are rearranged")
    parser.add_argument("target", type=Path, help="Image whose layout the pixels form")
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output path (default: <source>_morph.<format>)",
    )

    # Mosaic
    parser.add_argument("-b", "--block-size", type=int, default=None, help="Mosaic tile size in pixels (default: 1)")
    parser.add_argument("-s", "--stride", type=int, default=None, help="Sampling stride (default: block size)")
    parser.add_argument("-j", "--jitter", type=int, default=None, help="Target jitter radius in pixels (default: 0)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for jitter and scatter")
    parser.add_argument("--width", type=int, default=None, help="Output width (default: source width)")
    parser.add_argument("--height", type=int, default=None, help="Output height (default: source height)")

    # Output
    parser.add_argument("-f", "--format", type=str, default=None, choices=OUTPUT_FORMATS, help="Output format (default: png)")
    parser.add_argument("-q", "--quality", type=int, default=None, help="Encoder quality 1-100 (default: 90)")
    parser.add_argument("--no-enhance", action="store_true", help="Skip the brighten/saturate/sharpen pass")

    # Animation
    parser.add_argument("--preview", action="store_true", help="Play the particle transition in a window")
    parser.add_argument("--duration", type=float, default=None, help="Transition length in ms (default: 3000)")
    parser.add_argument("--fps", type=int, default=None, help="Frame rate for exported frames (default: 60)")
    parser.add_argument(
        "--frames",
        type=Path,
        default=None,
        help="Write the particle transition as numbered PNG frames into this directory",
    )

    # Config file (individual flags override it)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON config file with mosaic/animation/output sections",
    )
    return parser


def _apply_overrides(config: PixelmorphConfig, args: argparse.Namespace) -> PixelmorphConfig:
    """Fold explicit CLI flags into the config (re-validating each section)."""
    mosaic = vars(config.mosaic).copy()
    output = vars(config.output).copy()
    animation = vars(config.animation).copy()

    if args.block_size is not None:
        mosaic["mosaic_block_size"] = args.block_size
    if args.stride is not None:
        mosaic["sample_stride"] = args.stride
    if args.jitter is not None:
        mosaic["jitter_radius"] = args.jitter
    if args.seed is not None:
        mosaic["seed"] = args.seed
    if args.format is not None:
        output["format"] = args.format
    if args.quality is not None:
        output["quality"] = args.quality
    if args.no_enhance:
        output["enhance"] = False
    if args.duration is not None:
        animation["duration_ms"] = args.duration
    if args.fps is not None:
        animation["fps"] = args.fps

    return PixelmorphConfig(
        mosaic=type(config.mosaic)(**mosaic),
        animation=type(config.animation)(**animation),
        output=type(config.output)(**output),
    )


def _start_animation(pipeline: MorphPipeline, args: argparse.Namespace, width: int, height: int):
    """Build a particle engine, or report why it could not start and return None."""
    from pixelmorph.animation.particles import ParticleConvergenceEngine

    cfg = pipeline.animation
    try:
        correspondence, target_pixels = pipeline.prepare_animation(
            args.source, args.target, width, height
        )
        engine = ParticleConvergenceEngine(
            correspondence, width, height, cfg, seed=pipeline.mosaic.seed
        )
    except PixelmorphError as e:
        print(f"Error: animation could not start: {e}", file=sys.stderr)
        return None

    print(f"\nAnimating {len(engine)} particles over {cfg.duration_ms / 1000:.1f}s")
    return engine, flatten(target_pixels, cfg.background)


def _export_frames(engine, final_image, frames_dir: Path) -> int:
    """Render the whole run at the configured fps into numbered PNGs."""
    from PIL import Image

    from pixelmorph.animation.raster import render_run

    frames_dir.mkdir(parents=True, exist_ok=True)
    count = 0
    for i, frame in enumerate(
        render_run(engine, final_frame=final_image, progress_callback=_progress_bar)
    ):
        Image.fromarray(frame).save(frames_dir / f"frame_{i:05d}.png")
        count += 1
    print(f"  Frames: {count} written to {frames_dir}")
    return count


def _run_preview(engine, final_image) -> bool:
    from pixelmorph.animation.preview import run_preview

    completed = run_preview(engine, final_image=final_image)
    print("  Transition complete" if completed else "  Transition cancelled")
    return completed


def main(argv: list[str] | None = None):
    args = build_parser().parse_args(argv)

    for label, path in (("Source", args.source), ("Target", args.target)):
        if not path.exists():
            print(f"Error: {label} image not found: {path}", file=sys.stderr)
            sys.exit(1)

    try:
        if args.config:
            if not args.config.exists():
                print(f"Error: Config file not found: {args.config}", file=sys.stderr)
                sys.exit(1)
            config = load_config(args.config)
        else:
            config = PixelmorphConfig()
        config = _apply_overrides(config, args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    output = args.output
    if output is None:
        ext = "jpg" if config.output.format == "jpeg" else config.output.format
        output = args.source.with_name(f"{args.source.stem}_morph.{ext}")

    pipeline = MorphPipeline(config, verbose=True)

    print(f"Morphing {args.source} -> {args.target}")
    print(
        f"  Block: {config.mosaic.mosaic_block_size}, Stride: {config.mosaic.stride}, "
        f"Jitter: {config.mosaic.jitter_radius}"
    )
    t0 = time.time()

    try:
        result = pipeline.process(
            args.source,
            args.target,
            output_path=output,
            width=args.width,
            height=args.height,
        )
    except PixelmorphError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    estimate = estimate_processing_time(result["width"], result["height"])
    print(f"\nMapped {result['n_mapped']} of {result['n_source']} source / {result['n_target']} target samples")
    print(f"  {result['width']}x{result['height']} {result['format']}, {result['size'] / 1024:.1f} KB")
    print(f"  Took {time.time() - t0:.2f}s (estimate {estimate}ms)")
    print(f"  Output: {output}")

    if args.preview or args.frames:
        started = _start_animation(pipeline, args, result["width"], result["height"])
        if started is None:
            return
        engine, final_image = started
        if args.frames:
            _export_frames(engine, final_image, args.frames)
            engine.reset()
        if args.preview:
            _run_preview(engine, final_image)


if __name__ == "__main__":
    main()
