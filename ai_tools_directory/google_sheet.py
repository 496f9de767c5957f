"""Read tools from the CSV export of a published Google Sheet."""

import csv
import io
import logging
from typing import Dict
from typing import List
from typing import Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ai_tools_directory import config
from ai_tools_directory.models import Tool
from ai_tools_directory.models import placeholder_image

logger = logging.getLogger(__name__)


def sheet_csv_url(sheet_id: str, sheet_name: str = config.DEFAULT_SHEET_NAME) -> str:
    """Google Visualization export URL, which avoids the redirects of the /pub link."""
    return f"https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:csv&sheet={quote(sheet_name)}"


def parse_csv(text: str) -> List[Dict[str, str]]:
    """Parse CSV text into header-keyed rows. Quoted fields may contain commas."""
    rows = [row for row in csv.reader(io.StringIO(text or "")) if any(cell.strip() for cell in row)]
    if len(rows) < 2:
        return []

    header = [h.strip().strip('"') for h in rows[0]]
    parsed = []
    for row in rows[1:]:
        parsed.append({col: (row[i].strip() if i < len(row) else "") for i, col in enumerate(header)})
    return parsed


def _flag(value: str) -> bool:
    return (value or "").strip().upper() == "TRUE"


def rows_to_tools(rows: List[Dict[str, str]]) -> List[Tool]:
    """Map sheet rows onto tools, filling defaults for empty cells."""
    tools = []
    for index, row in enumerate(rows):
        name = row.get("Name", "")
        try:
            tools.append(
                Tool(
                    id=f"gsheet-{index}-{name}",
                    name=name or "Untitled",
                    description=row.get("Description") or "No description available.",
                    category=row.get("Category") or "General",
                    image_url=row.get("Image Link") or placeholder_image(name or str(index)),
                    url=row.get("Tool Link") or "#",
                    featured=_flag(row.get("Featured", "")),
                    paid=_flag(row.get("Paid", "")),
                )
            )
        except ValidationError as e:
            logger.warning(f"Skipping sheet row {index}: {e}")
    return tools


async def download_tools(url: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> List[Tool]:
    """Fetch and parse the sheet. Raises on network or HTTP errors."""
    async with httpx.AsyncClient(follow_redirects=True, timeout=config.http_timeout(), transport=transport) as client:
        response = await client.get(url)
        response.raise_for_status()
        tools = rows_to_tools(parse_csv(response.text))
    logger.info(f"Loaded {len(tools):,} tools from Google Sheet")
    return tools


async def fetch_tools(url: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> List[Tool]:
    """Like ``download_tools`` but returns an empty list on any fetch failure."""
    try:
        return await download_tools(url, transport=transport)
    except httpx.HTTPError as e:
        logger.error(f"Error fetching Google Sheet data: {e}")
        return []
