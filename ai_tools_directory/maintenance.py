"""Maintenance tasks for the local tools store."""

import asyncio
import logging
from typing import Dict
from typing import List
from typing import Optional

from ai_tools_directory import config
from ai_tools_directory.data_manager import load_tools
from ai_tools_directory.data_manager import save_tools
from ai_tools_directory.google_sheet import fetch_tools
from ai_tools_directory.google_sheet import sheet_csv_url
from ai_tools_directory.logging_config import IndentLogger
from ai_tools_directory.logging_config import setup_logging
from ai_tools_directory.logging_utils import pipeline_summary

logger = IndentLogger(logging.getLogger(__name__))


def deduplicate_tools(tools: List[Dict], existing: Optional[List[Dict]] = None) -> List[Dict]:
    """Remove duplicate tools based on URL and name similarity.

    Tools in ``existing`` count as already seen and are not returned.
    """
    seen_urls = set()
    seen_names = set()
    for tool in existing or []:
        seen_urls.add(tool["url"])
        seen_names.add(tool["name"].lower())

    unique_tools = []
    for tool in tools:
        name_key = tool["name"].lower()
        url_seen = tool["url"] != "#" and tool["url"] in seen_urls
        if not url_seen and not any(
            existing_name in name_key or name_key in existing_name for existing_name in seen_names
        ):
            seen_urls.add(tool["url"])
            seen_names.add(name_key)
            unique_tools.append(tool)

    return unique_tools


async def import_sheet(sheet_id: Optional[str] = None, sheet_name: Optional[str] = None, transport=None) -> int:
    """Append tools from a published Google Sheet to the local store."""
    sheet_id = sheet_id or config.google_sheet_id()
    sheet_name = sheet_name or config.google_sheet_name()
    url = sheet_csv_url(sheet_id, sheet_name)
    with pipeline_summary("import_sheet") as summary:
        summary.add_attribute("sheet_id", sheet_id)
        summary.add_attribute("sheet_name", sheet_name)
        logger.info("Starting sheet import")
        logger.indent()

        current = load_tools()
        logger.info(f"Loaded {len(current['tools'])} existing tools")

        fetched = [t.model_dump() for t in await fetch_tools(url, transport=transport)]
        if fetched:
            logger.info(f"Fetched {len(fetched)} rows from sheet")
        else:
            logger.warning("Sheet returned no rows, nothing to import")
        summary.add_metric("rows_fetched", len(fetched))

        new_tools = deduplicate_tools(fetched, existing=current["tools"])
        if new_tools:
            current["tools"].extend(new_tools)
            save_tools(current)
            logger.info(f"Added {len(new_tools)} tools (now {len(current['tools'])} total)")
        else:
            logger.info("No new tools found")
        summary.add_metric("tools_added", len(new_tools))

        logger.dedent()
        logger.info("Sheet import complete")
    return len(new_tools)


def deduplicate_database() -> int:
    """Deduplicate the local tools store. Returns the number removed."""
    with pipeline_summary("dedupe") as summary:
        summary.add_attribute("storage_backend", config.storage_backend())
        current = load_tools()
        total = len(current["tools"])
        logger.info(f"Processing {total} tools")

        current["tools"] = deduplicate_tools(current["tools"])
        removed = total - len(current["tools"])
        if removed:
            save_tools(current)
        logger.info(f"Removed {removed} duplicates")
        summary.add_metric("tools_removed", removed)
    return removed


def main(argv=None) -> None:
    import argparse

    parser = argparse.ArgumentParser(description="AI Tools Directory Maintenance Tasks")
    sub = parser.add_subparsers(dest="task", required=True)
    import_parser = sub.add_parser("import-sheet", help="Import tools from a published Google Sheet")
    import_parser.add_argument("--sheet-id", help="Spreadsheet id (defaults to GOOGLE_SHEET_ID)")
    import_parser.add_argument("--sheet-name", help="Sheet tab name (defaults to GOOGLE_SHEET_NAME)")
    sub.add_parser("dedupe", help="Remove duplicate tools from the local store")

    args = parser.parse_args(argv)
    setup_logging(config.log_level())

    if args.task == "import-sheet":
        asyncio.run(import_sheet(args.sheet_id, args.sheet_name))
    elif args.task == "dedupe":
        deduplicate_database()


if __name__ == "__main__":
    main()
