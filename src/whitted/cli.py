"""Render a scene file from the command line.

Usage:
    whitted SCENE [DEPTH] [options]
    python -m whitted SCENE [DEPTH] [options]

Arguments:
    SCENE               Scene description file
    DEPTH               Maximum reflection depth (default: 4)

Options:
    --output PATH       Output image (default: the path named in the scene)
    --arch {cpu,gpu}    Taichi backend (default: cpu)
    --batch-rows ROWS   Rows per progress update (default: whole frame)
    --preview           Show the result in a Matplotlib window
    --quiet             Suppress progress output

Example:
    whitted scenes/mirrors.txt 6 --output mirrors.png
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from whitted.core.integrator import DEFAULT_MAX_DEPTH


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {number}")
    return number


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="whitted",
        description="Render a scene of spheres with a Whitted-style ray tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "scene",
        type=Path,
        help="Scene description file",
    )
    parser.add_argument(
        "depth",
        type=_non_negative_int,
        nargs="?",
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum reflection depth (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output image path (default: the path named in the scene file)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--batch-rows",
        type=_positive_int,
        default=None,
        help="Rows per progress update (default: whole frame)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the rendered image in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)


def _check_writable(path: Path) -> None:
    """Fail before rendering if the output cannot be created."""
    directory = path.parent
    if not directory.is_dir():
        raise OSError(f"Cannot create output file {path}: directory {directory} does not exist")
    if path.is_dir():
        raise OSError(f"Cannot create output file {path}: it is a directory")


def render_scene_file(
    scene_path: str | Path,
    depth: int = DEFAULT_MAX_DEPTH,
    output_path: str | None = None,
    batch_rows: int | None = None,
    quiet: bool = False,
    preview: bool = False,
) -> Path:
    """Render a scene file and save the image.

    Taichi must already be initialized (see whitted.core.init_taichi).

    Args:
        scene_path: Scene description file.
        depth: Maximum reflection depth.
        output_path: Output image path; defaults to the scene's output path.
        batch_rows: Rows per progress update; None renders in one launch.
        quiet: If True, suppress progress output.
        preview: If True, show the result with Matplotlib.

    Returns:
        Path to the saved image file.

    Raises:
        FileNotFoundError: If the scene file does not exist.
        SceneFormatError: If the scene file is malformed.
        OSError: If the output cannot be written.
    """
    from whitted.core.renderer import Renderer
    from whitted.scene.loader import load_scene

    scene = load_scene(scene_path)
    output_file = Path(output_path or scene.output)
    _check_writable(output_file)

    if not quiet:
        print(
            f"Loaded {scene_path}: {len(scene.spheres)} spheres, "
            f"{len(scene.lights)} lights ({scene.width}x{scene.height})"
        )

    renderer = Renderer(scene, max_depth=depth)

    if not quiet:
        print(f"Rendering with max depth {depth}...")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            print(
                f"\r  Progress: {current}/{target} rows ({progress_pct:.1f}%) - {elapsed:.2f}s",
                end="",
                flush=True,
            )

    renderer.render(batch_rows=batch_rows, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    renderer.save_image(str(output_file))

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if preview:
        from whitted.preview.display import show_preview

        show_preview(renderer.get_image_numpy(), title=str(scene_path))

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    from whitted.core import init_taichi
    from whitted.scene.loader import SceneFormatError

    args = parse_args(argv)

    init_taichi(args.arch)

    try:
        render_scene_file(
            args.scene,
            depth=args.depth,
            output_path=args.output,
            batch_rows=args.batch_rows,
            quiet=args.quiet,
            preview=args.preview,
        )
        return 0
    except (OSError, SceneFormatError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
