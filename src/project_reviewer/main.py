"""Command-line entry point: serve the API or review a project directly."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os

import uvicorn

from project_reviewer.domain.exceptions import ProjectReviewerError
from project_reviewer.domain.ports.run_recorder import FINAL_REPORT
from project_reviewer.infrastructure.config import Settings, get_settings
from project_reviewer.infrastructure.run_cache import RunCache
from project_reviewer.interface.dependencies import build_gateway, build_use_case

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="project-reviewer",
        description="LLM-driven code review of a local project.",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("serve", help="Start the HTTP API (default).")

    review_parser = subparsers.add_parser("review", help="Review a project and write report.json.")
    review_parser.add_argument("path", help="Path to the project root.")
    review_parser.add_argument(
        "--max-files",
        type=int,
        default=None,
        help="Review budget for this run (defaults to MAX_FILES_TO_REVIEW).",
    )
    return parser


def _serve(settings: Settings) -> None:
    uvicorn.run(
        "project_reviewer.interface.app:create_app",
        factory=True,
        host=os.environ.get("HOST", settings.host),
        port=int(os.environ.get("PORT", settings.port)),
        log_level=settings.log_level.lower(),
    )


async def _review(settings: Settings, path: str, max_files: int | None) -> RunCache:
    adapter = build_gateway(settings)
    use_case = build_use_case(settings, adapter)
    cache = RunCache(settings.cache_dir or "./cache")
    try:
        await use_case.execute(path, max_files=max_files, recorder=cache)
    finally:
        await adapter.close()
    return cache


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    if args.command != "review":
        _serve(settings)
        return

    logger.info("Starting project review for: %s", args.path)
    try:
        cache = asyncio.run(_review(settings, args.path, args.max_files))
    except ProjectReviewerError as exc:
        parser.exit(1, f"Error running project review: {exc}\n")
    print(f"Review completed. Report available at: {cache.path / FINAL_REPORT}")


if __name__ == "__main__":
    main()
