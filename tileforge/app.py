"""Command-line entry point for browsing and updating the level catalog."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tileforge.core.catalog import CatalogManager
from tileforge.core.config import CatalogConfig, load_config
from tileforge.core.grid import TileGrid, TileType
from tileforge.core.storage import JsonFileStorage

TILE_GLYPHS = {TileType.EMPTY: ".", TileType.SOLID: "#", TileType.NETHER: "%"}


def configure_logging(verbose: bool = False) -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def render_grid(grid: TileGrid) -> str:
    """Text dump of a grid, one line per row."""
    lines = []
    for row in range(grid.rows):
        lines.append("".join(TILE_GLYPHS.get(grid.get(col, row), "?") for col in range(grid.cols)))
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tileforge", description="Procedural platformer level catalog.")
    parser.add_argument("--config", type=Path, help="YAML catalog config")
    parser.add_argument("--data-dir", type=Path, help="directory holding saved progress")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="list levels and their progress")
    list_cmd.add_argument("--category", choices=["overworld", "nether", "custom"])

    show_cmd = sub.add_parser("show", help="print a level's tile grid")
    show_cmd.add_argument("level_id", type=int)

    complete_cmd = sub.add_parser("complete", help="record a level completion")
    complete_cmd.add_argument("level_id", type=int)
    complete_cmd.add_argument("stars", type=float)
    complete_cmd.add_argument("--time", type=float, dest="elapsed", help="completion time in seconds")

    stars_cmd = sub.add_parser("stars", help="raise a level's star rating")
    stars_cmd.add_argument("level_id", type=int)
    stars_cmd.add_argument("stars", type=float)

    sub.add_parser("stats", help="show overall progress")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    config = load_config(args.config) if args.config else CatalogConfig()
    catalog = CatalogManager(JsonFileStorage(args.data_dir), config)

    if args.command == "list":
        for summary in catalog.list_summaries():
            if args.category and summary.category.value != args.category:
                continue
            mark = "x" if summary.completed else " "
            print(f"{summary.id:>5} [{mark}] {'*' * summary.stars:<5} {summary.name} ({summary.category.value})")
        return 0

    if args.command == "show":
        grid = catalog.get_grid(args.level_id)
        if grid is None:
            print(f"No level with id {args.level_id}", file=sys.stderr)
            return 1
        print(render_grid(grid))
        return 0

    if args.command in ("complete", "stars"):
        if catalog.get_by_id(args.level_id) is None:
            print(f"No level with id {args.level_id}", file=sys.stderr)
            return 1
        if args.command == "complete":
            saved = catalog.mark_complete(args.level_id, args.stars, args.elapsed)
        else:
            saved = catalog.set_stars(args.level_id, args.stars)
        level = catalog.get_by_id(args.level_id)
        print(f"{level.name}: {level.stars} star(s), completed={level.completed}")
        if catalog.freeplay_unlocked:
            print("Freeplay unlocked!")
        return 0 if saved else 2

    stats = catalog.progress_stats()
    print(f"Completed: {stats.completed}/{stats.total}")
    print(f"Stars: {stats.stars}/{stats.max_stars}")
    print(f"Freeplay: {'unlocked' if catalog.freeplay_unlocked else 'locked'}")
    return 0


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
