"""Tool sources: local store, Sheety REST proxy or a published Google Sheet."""

import logging
from datetime import datetime
from datetime import timezone
from typing import Dict
from typing import List
from typing import Optional

import httpx
from diskcache import Cache
from pydantic import ValidationError

from ai_tools_directory import config
from ai_tools_directory.defaults import default_tools
from ai_tools_directory.google_sheet import download_tools
from ai_tools_directory.google_sheet import sheet_csv_url
from ai_tools_directory.models import Tool
from ai_tools_directory.sheety import SheetyClient
from ai_tools_directory.storage import TOOLS_KEY
from ai_tools_directory.storage import get_store

logger = logging.getLogger(__name__)


def load_tools(store=None) -> Dict:
    """Load the tools document, seeding it with the default list on first use."""
    store = store or get_store()
    data = store.read(TOOLS_KEY, None)
    if data is None:
        logger.info("No tools document found, seeding default tools")
        data = {"tools": [t.model_dump() for t in default_tools()], "last_updated": ""}
        save_tools(data, store)
    logger.debug(f"Loaded {len(data['tools']):,} tools from store")
    return data


def save_tools(tools_data: Dict, store=None) -> None:
    store = store or get_store()
    tools_data["last_updated"] = datetime.now(timezone.utc).isoformat()
    store.write(TOOLS_KEY, tools_data)
    logger.info(f"Saved {len(tools_data['tools'])} tools")


def _cache_key(name: str) -> str:
    return f"tools:{name}"


def remember_tools(name: str, tools: List[Tool]) -> None:
    """Keep the last good remote fetch for offline fallback."""
    with Cache(str(config.cache_dir())) as cache:
        cache[_cache_key(name)] = [t.model_dump() for t in tools]


def cached_tools(name: str) -> List[Tool]:
    with Cache(str(config.cache_dir())) as cache:
        rows = cache.get(_cache_key(name), [])
    return [Tool(**row) for row in rows]


class LocalToolSource:
    """Tools kept in the key/value store."""

    name = "local"

    def __init__(self, store=None) -> None:
        self.store = store or get_store()

    async def list_tools(self) -> List[Tool]:
        tools = []
        for row in load_tools(self.store)["tools"]:
            try:
                tools.append(Tool(**row))
            except ValidationError as e:
                logger.warning(f"Skipping invalid stored tool {row.get('id')}: {e}")
        return tools

    async def add_tool(self, tool: Tool) -> Tool:
        data = load_tools(self.store)
        data["tools"].append(tool.model_dump())
        save_tools(data, self.store)
        return tool

    async def update_tool(self, tool_id: str, changes: Dict) -> None:
        data = load_tools(self.store)
        for row in data["tools"]:
            if str(row.get("id")) == tool_id:
                row.update(changes)
                save_tools(data, self.store)
                return
        logger.warning(f"Tool {tool_id} not in store, update skipped")

    async def delete_tool(self, tool_id: str) -> None:
        data = load_tools(self.store)
        remaining = [row for row in data["tools"] if str(row.get("id")) != tool_id]
        if len(remaining) == len(data["tools"]):
            logger.warning(f"Tool {tool_id} not in store, delete skipped")
            return
        data["tools"] = remaining
        save_tools(data, self.store)


class SheetyToolSource:
    """Remote REST proxy. Failures are logged and never raised."""

    name = "sheety"

    def __init__(self, client: Optional[SheetyClient] = None) -> None:
        self.client = client or SheetyClient(config.sheety_url(), token=config.sheety_token())

    async def list_tools(self) -> List[Tool]:
        try:
            tools = await self.client.list_tools()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching tools from Sheety, using cached list: {e}")
            return cached_tools(self.name)
        remember_tools(self.name, tools)
        return tools

    async def add_tool(self, tool: Tool) -> Tool:
        try:
            return await self.client.add_tool(tool)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to add {tool.name} to Sheety: {e}")
            return tool

    async def update_tool(self, tool_id: str, changes: Dict) -> None:
        try:
            await self.client.update_tool(tool_id, changes)
        except httpx.HTTPError as e:
            logger.error(f"Failed to update tool {tool_id} on Sheety: {e}")

    async def delete_tool(self, tool_id: str) -> None:
        try:
            await self.client.delete_tool(tool_id)
        except httpx.HTTPError as e:
            logger.error(f"Failed to delete tool {tool_id} on Sheety: {e}")


class GoogleSheetToolSource:
    """Read-only published sheet. Writes live only in the running process."""

    name = "gsheet"

    def __init__(self, url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.url = url or sheet_csv_url(config.google_sheet_id(), config.google_sheet_name())
        self.transport = transport

    async def list_tools(self) -> List[Tool]:
        try:
            tools = await download_tools(self.url, transport=self.transport)
        except httpx.HTTPError as e:
            logger.error(f"Error fetching Google Sheet, using cached list: {e}")
            return cached_tools(self.name)
        remember_tools(self.name, tools)
        return tools

    async def add_tool(self, tool: Tool) -> Tool:
        logger.warning(f"Google Sheet source is read-only, {tool.name} is not persisted")
        return tool

    async def update_tool(self, tool_id: str, changes: Dict) -> None:
        logger.warning(f"Google Sheet source is read-only, update of {tool_id} is not persisted")

    async def delete_tool(self, tool_id: str) -> None:
        logger.warning(f"Google Sheet source is read-only, delete of {tool_id} is not persisted")


def get_tool_source():
    """Build the source selected by AITOOLS_TOOLS_SOURCE."""
    source = config.tools_source()
    if source == "local":
        return LocalToolSource()
    if source == "sheety":
        return SheetyToolSource()
    if source == "gsheet":
        return GoogleSheetToolSource()
    raise RuntimeError(f"Unknown tools source: {source}")
