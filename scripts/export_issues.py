#!/usr/bin/env python3
"""
Export issues matching a YouTrack query to CSV.
Adds the requested custom-field columns and the resolution time derived from history.

Usage:
    python scripts/export_issues.py "project: PROJ" --column Priority --column Type -o issues.csv
"""

import argparse
from pathlib import Path

from loguru import logger

from youtrack_hub.core.config import get_settings
from youtrack_hub.core.logger import setup_logger
from youtrack_hub.schemas.youtrack.activity import HistoryEvent
from youtrack_hub.services.youtrack_client import YouTrackClient
from youtrack_hub.utils.async_helpers import run_async
from youtrack_hub.utils.export import issues_to_dataframe


async def collect(query: str, max_results: int | None):
    async with YouTrackClient.from_settings() as client:
        issues = await client.list_issues(query, max_results=max_results)
        histories: dict[str, list[HistoryEvent]] = {}
        for issue in issues:
            histories[issue.idReadable] = await client.get_issue_history(issue.idReadable)
    return issues, histories


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("query", help="YouTrack search query")
    parser.add_argument("-c", "--column", action="append", default=[], help="Custom field to export")
    parser.add_argument("-o", "--output", type=Path, default=Path("issues.csv"))
    parser.add_argument("--max-results", type=int, default=None)
    args = parser.parse_args()

    settings = get_settings()
    if settings.log_directory:
        settings.log_directory.mkdir(parents=True, exist_ok=True)
    setup_logger(debug=settings.debug, log_file=settings.log_file)

    issues, histories = run_async(collect(args.query, args.max_results))
    df = issues_to_dataframe(
        issues,
        histories,
        args.column,
        field_name=settings.state_field_name,
        resolved_state=settings.resolved_state_name,
    )
    df.to_csv(args.output, index=False)
    logger.info(f"Exported {len(df)} issues to {args.output}")


if __name__ == "__main__":
    main()
