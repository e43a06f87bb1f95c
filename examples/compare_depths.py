#!/usr/bin/env python3
"""Render a scene at increasing reflection depths and compare the results.

Each render is compared with the previous depth by RMSE, which shows how
quickly the mirror contributions converge. The final image can be shown in
a Matplotlib window.

Usage:
    python examples/compare_depths.py [SCENE] [options]

Options:
    --max-depth DEPTH   Deepest render (default: 6)
    --batch-rows ROWS   Rows per progress update (default: 32)
    --save-dir DIR      Write each render as DIR/depth_<n>.png
    --preview           Show the deepest render
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Compare renders of one scene across reflection depths.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "scene",
        type=Path,
        nargs="?",
        default=Path(__file__).parent.parent / "scenes" / "mirrors.txt",
        help="Scene description file (default: scenes/mirrors.txt)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=6,
        help="Deepest render (default: 6)",
    )
    parser.add_argument(
        "--batch-rows",
        type=int,
        default=32,
        help="Rows per progress update (default: 32)",
    )
    parser.add_argument(
        "--save-dir",
        type=Path,
        default=None,
        help="Directory for per-depth PNG files",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the deepest render",
    )
    return parser.parse_args()


def compare_depths(
    scene_path: Path,
    max_depth: int = 6,
    batch_rows: int = 32,
    save_dir: Path | None = None,
    preview: bool = False,
) -> list[float]:
    """Render depths 0..max_depth and return RMSE between neighbours.

    Returns:
        RMSE of depth n against depth n - 1, for n = 1..max_depth.
    """
    from whitted.core.renderer import Renderer
    from whitted.preview.export import compute_rmse
    from whitted.scene.loader import load_scene

    scene = load_scene(scene_path)
    print(f"Loaded {scene_path} ({scene.width}x{scene.height})")

    if save_dir is not None:
        save_dir.mkdir(parents=True, exist_ok=True)

    errors = []
    previous = None
    image = None
    for depth in range(max_depth + 1):
        renderer = Renderer(scene, max_depth=depth)
        start_time = time.time()
        for done, total in renderer.render_progressive(batch_rows):
            print(f"\r  depth {depth}: {done}/{total} rows", end="", flush=True)
        elapsed = time.time() - start_time

        image = renderer.get_image_numpy()
        rays = int(renderer.get_ray_counts().sum())
        line = f"\r  depth {depth}: {rays} rays in {elapsed:.2f}s"
        if previous is not None:
            errors.append(compute_rmse(image, previous))
            line += f", RMSE vs depth {depth - 1}: {errors[-1]:.5f}"
        print(line)

        if save_dir is not None:
            renderer.save_image(str(save_dir / f"depth_{depth}.png"))
        previous = image

    if preview and image is not None:
        from whitted.preview.display import show_preview

        show_preview(image, title=f"{scene_path.name} - depth {max_depth}")

    return errors


def main() -> int:
    """Main entry point."""
    from whitted.core import init_taichi
    from whitted.scene.loader import SceneFormatError

    args = parse_args()
    init_taichi("cpu")

    try:
        compare_depths(
            args.scene,
            max_depth=args.max_depth,
            batch_rows=args.batch_rows,
            save_dir=args.save_dir,
            preview=args.preview,
        )
        return 0
    except (OSError, SceneFormatError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
