"""Client for a spreadsheet-backed REST proxy (Sheety style).

Contract:
    GET    {base}          -> {"tools": [row, ...]}
    POST   {base}          <- {"tool": row}            -> {"tool": row-with-id}
    PUT    {base}/{id}     <- {"tool": partial row}    -> {"tool": row}
    DELETE {base}/{id}

Rows use the sheet's camelCase column names. There is no pagination and no
error schema beyond the HTTP status.
"""

import logging
from typing import Dict
from typing import List
from typing import Optional

import httpx
from pydantic import ValidationError

from ai_tools_directory import config
from ai_tools_directory.models import Tool

logger = logging.getLogger(__name__)

# Tool field -> sheet column
FIELD_TO_COLUMN = {
    "name": "name",
    "description": "description",
    "category": "category",
    "url": "url",
    "image_url": "imageUrl",
    "paid": "paid",
    "featured": "featured",
}


def _truthy(value) -> bool:
    if isinstance(value, str):
        return value.strip().upper() in ("TRUE", "YES", "1")
    return bool(value)


def row_to_tool(row: Dict) -> Tool:
    fields = {
        "name": row.get("name") or "",
        "description": row.get("description") or "",
        "category": row.get("category") or "Other",
        "url": row.get("url") or row.get("toolUrl") or "",
        "image_url": row.get("imageUrl") or "",
        "paid": _truthy(row.get("paid", row.get("isPaid", False))),
        "featured": _truthy(row.get("featured", False)),
    }
    if row.get("id") is not None:
        fields["id"] = row["id"]
    return Tool(**fields)


def _body(response: httpx.Response, key: str):
    """Value stored under ``key`` in a JSON object body. Other shapes raise ValueError."""
    payload = response.json()
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object from Sheety, got {type(payload).__name__}")
    return payload.get(key)


def tool_to_row(changes: Dict) -> Dict:
    """Translate tool fields to sheet columns, dropping the id and unknown keys."""
    return {FIELD_TO_COLUMN[k]: v for k, v in changes.items() if k in FIELD_TO_COLUMN}


class SheetyClient:
    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout if timeout is not None else config.http_timeout()
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        return httpx.AsyncClient(
            follow_redirects=True, timeout=self.timeout, headers=headers, transport=self.transport
        )

    async def list_tools(self) -> List[Tool]:
        async with self._client() as client:
            response = await client.get(self.base_url)
            response.raise_for_status()
            rows = _body(response, "tools") or []
        if not isinstance(rows, list):
            raise ValueError(f"Expected a list of tools from Sheety, got {type(rows).__name__}")

        tools = []
        for row in rows:
            if not isinstance(row, dict):
                logger.warning(f"Skipping non-object row: {row!r}")
                continue
            try:
                tools.append(row_to_tool(row))
            except ValidationError as e:
                logger.warning(f"Skipping invalid row {row.get('id')}: {e}")
        logger.info(f"Loaded {len(tools):,} tools from Sheety")
        return tools

    async def add_tool(self, tool: Tool) -> Tool:
        """Append a row. Returns the tool carrying the server-assigned id."""
        payload = {"tool": tool_to_row(tool.model_dump())}
        async with self._client() as client:
            response = await client.post(self.base_url, json=payload)
            response.raise_for_status()
            created = _body(response, "tool") or {}
        if not isinstance(created, dict):
            raise ValueError(f"Expected a tool object from Sheety, got {type(created).__name__}")

        if created.get("id") is not None:
            return tool.model_copy(update={"id": str(created["id"])})
        return tool

    async def update_tool(self, tool_id: str, changes: Dict) -> None:
        async with self._client() as client:
            response = await client.put(f"{self.base_url}/{tool_id}", json={"tool": tool_to_row(changes)})
            response.raise_for_status()

    async def delete_tool(self, tool_id: str) -> None:
        async with self._client() as client:
            response = await client.delete(f"{self.base_url}/{tool_id}")
            response.raise_for_status()
