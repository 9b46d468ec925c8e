"""pointprep CLI — command-line interface for point cloud preprocessing."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from pointprep._version import __version__


def _setup_logging(args: argparse.Namespace) -> None:
    if getattr(args, "verbose", False):
        logging.basicConfig(level=logging.INFO, format="%(message)s")


def _missing(path: str) -> bool:
    if not Path(path).exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return True
    return False


def _print_stats(stats: dict[str, dict]) -> None:
    for stage, values in stats.items():
        for name, value in values.items():
            print(f"  {stage}: {name.replace('_', ' ')} = {value:,}")


def cmd_info(args: argparse.Namespace) -> int:
    """Show info about a point file."""
    from pointprep.io.registry import read

    if _missing(args.file):
        return 1

    pc = read(args.file)
    print(f"File: {args.file}")
    print(f"Points: {pc.num_points:,}")
    print(f"Dimensions: {', '.join(pc.dimensions)}")
    if pc.num_points:
        points = pc.positions()
        for axis, name in enumerate("XYZ"):
            print(f"Bounds {name}: [{points[:, axis].min():.3f}, {points[:, axis].max():.3f}]")
    print(f"Normals: {'yes' if pc.has_normals else 'no'}")
    return 0


def cmd_smooth(args: argparse.Namespace) -> int:
    """Smooth a point file by local plane projection."""
    from pointprep.filters.smooth import SmoothFilter
    from pointprep.io.registry import read, write

    if _missing(args.input):
        return 1
    _setup_logging(args)

    t0 = time.time()
    pc = read(args.input)
    result = SmoothFilter(k=args.k, iterations=args.iterations, precision=args.precision).filter(pc)
    n = write(result, args.output)
    elapsed = time.time() - t0

    print(f"Smoothed {n:,} points (k={args.k}): {args.input} -> {args.output} ({elapsed:.1f}s)")
    _print_stats(result.metadata.stats)
    return 0


def cmd_normals(args: argparse.Namespace) -> int:
    """Estimate and orient normals; fail if any normal stays unoriented."""
    from pointprep.filters.normal import NormalFilter
    from pointprep.filters.orient import OrientFilter
    from pointprep.io.registry import read, write

    if _missing(args.input):
        return 1
    _setup_logging(args)

    t0 = time.time()
    pc = read(args.input, skip_normals=True)
    result = NormalFilter(k=args.k, precision=args.precision).filter(pc)
    if not args.no_orient:
        result = OrientFilter(k=args.k, weight=args.weight, root=args.root).filter(result)
    n = write(result, args.output)
    elapsed = time.time() - t0

    print(f"Estimated {n:,} normals (k={args.k}): {args.input} -> {args.output} ({elapsed:.1f}s)")
    _print_stats(result.metadata.stats)

    if args.no_orient:
        return 0
    unoriented = int((~result.oriented()).sum())
    if unoriented:
        print(f"Error: {unoriented} normal(s) are unoriented", file=sys.stderr)
        return 1
    return 0


def cmd_preprocess(args: argparse.Namespace) -> int:
    """Smooth, estimate and orient normals in one run."""
    from pointprep.core.pointcloud import PointCloud
    from pointprep.io.registry import read, write
    from pointprep.pipeline.preprocess import preprocess

    if _missing(args.input):
        return 1
    _setup_logging(args)

    t0 = time.time()
    pc = read(args.input, skip_normals=True)
    out = preprocess(
        pc.positions(),
        k=args.k,
        smooth=not args.no_smooth,
        iterations=args.iterations,
        precision=args.precision,
        weight=args.weight,
        root=args.root,
    )
    result = PointCloud.from_positions(out.points)
    result.set_normals(out.normals, out.oriented)
    n = write(result, args.output)
    elapsed = time.time() - t0

    print(f"Preprocessed {n:,} points: {args.input} -> {args.output} ({elapsed:.1f}s)")
    for line in out.report.summary():
        print(f"  {line}")
    return 0


def cmd_pipeline(args: argparse.Namespace) -> int:
    """Run a JSON pipeline."""
    from pointprep.pipeline import Pipeline

    if _missing(args.pipeline):
        return 1

    pipeline = Pipeline(Path(args.pipeline).read_text())

    errors = pipeline.validate()
    if errors:
        for e in errors:
            print(f"Validation error: {e}", file=sys.stderr)
        return 1

    _setup_logging(args)

    t0 = time.time()
    count = pipeline.execute()
    elapsed = time.time() - t0

    print(f"Processed {count:,} points in {elapsed:.1f}s")
    _print_stats(pipeline.stats)
    return 0


def _add_fit_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-k", type=int, default=10, help="Number of neighbors (default: 10)")
    parser.add_argument(
        "--precision", choices=["double", "exact"], default="double",
        help="Plane fit arithmetic (default: double)",
    )
    parser.add_argument("-v", "--verbose", action="store_true")


def _add_orient_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--weight", choices=["unsigned", "signed", "euclidean"], default="unsigned",
        help="Edge weight of the neighbor graph (default: unsigned)",
    )
    parser.add_argument(
        "--root", choices=["max_z", "first"], default="max_z",
        help="Root of each spanning tree (default: max_z)",
    )


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="pointprep",
        description="pointprep — point cloud smoothing and normal estimation",
    )
    parser.add_argument(
        "--version", action="version", version=f"pointprep {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    info_parser = subparsers.add_parser("info", help="Show point file info")
    info_parser.add_argument("file", help="Point file path")

    smooth_parser = subparsers.add_parser("smooth", help="Smooth point positions")
    smooth_parser.add_argument("input", help="Input file path")
    smooth_parser.add_argument("output", help="Output file path")
    smooth_parser.add_argument("--iterations", type=int, default=1)
    _add_fit_options(smooth_parser)

    normals_parser = subparsers.add_parser("normals", help="Estimate and orient normals")
    normals_parser.add_argument("input", help="Input file path")
    normals_parser.add_argument("output", help="Output file path (.pwn or .xyz)")
    normals_parser.add_argument("--no-orient", action="store_true", help="Skip orientation")
    _add_fit_options(normals_parser)
    _add_orient_options(normals_parser)

    pre_parser = subparsers.add_parser("preprocess", help="Smooth, then estimate and orient normals")
    pre_parser.add_argument("input", help="Input file path")
    pre_parser.add_argument("output", help="Output file path (.pwn or .xyz)")
    pre_parser.add_argument("--no-smooth", action="store_true", help="Skip smoothing")
    pre_parser.add_argument("--iterations", type=int, default=1)
    _add_fit_options(pre_parser)
    _add_orient_options(pre_parser)

    pipe_parser = subparsers.add_parser("pipeline", help="Run a JSON pipeline")
    pipe_parser.add_argument("pipeline", help="Path to JSON pipeline file")
    pipe_parser.add_argument("-v", "--verbose", action="store_true")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "smooth": cmd_smooth,
        "normals": cmd_normals,
        "preprocess": cmd_preprocess,
        "pipeline": cmd_pipeline,
    }

    try:
        return commands[args.command](args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
