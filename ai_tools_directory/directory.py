"""In-memory directory state kept in sync with its stores."""

import logging
from typing import List
from typing import Optional

from pydantic import ValidationError

from ai_tools_directory.catalog import ALL
from ai_tools_directory.catalog import DEFAULT_PER_PAGE
from ai_tools_directory.catalog import Page
from ai_tools_directory.catalog import categories_of
from ai_tools_directory.catalog import filter_prompts
from ai_tools_directory.catalog import filter_tools
from ai_tools_directory.catalog import paginate
from ai_tools_directory.catalog import sort_tools
from ai_tools_directory.data_manager import get_tool_source
from ai_tools_directory.errors import PromptNotFoundError
from ai_tools_directory.errors import ToolNotFoundError
from ai_tools_directory.errors import ToolValidationError
from ai_tools_directory.models import Prompt
from ai_tools_directory.models import Tool
from ai_tools_directory.storage import FEATURED_KEY
from ai_tools_directory.storage import PROMPTS_KEY
from ai_tools_directory.storage import get_store

logger = logging.getLogger(__name__)


def _invalid_fields(error: ValidationError) -> List[str]:
    return [str(err["loc"][0]) for err in error.errors() if err.get("loc")]


class ToolDirectory:
    """Tool list, featured ids and saved prompts.

    Tools come from a tool source (local store or a remote sheet); featured
    ids and prompts always live in the key/value store.
    """

    def __init__(self, source=None, store=None) -> None:
        self.source = source or get_tool_source()
        self.store = store or get_store()
        self.tools: List[Tool] = []
        self.featured_ids: List[str] = []
        self.prompts: List[Prompt] = []
        self.loaded = False

    async def load(self) -> None:
        self.tools = await self.source.list_tools()

        saved = self.store.read(FEATURED_KEY, None)
        if saved is None:
            self.featured_ids = [t.id for t in self.tools if t.featured]
        else:
            self.featured_ids = [str(i) for i in saved]
        self._apply_featured()

        self.prompts = []
        for row in self.store.read(PROMPTS_KEY, []):
            try:
                self.prompts.append(Prompt(**row))
            except ValidationError as e:
                logger.warning(f"Skipping invalid saved prompt: {e}")

        self.loaded = True
        logger.info(f"Directory loaded: {len(self.tools)} tools, {len(self.prompts)} prompts")

    def _apply_featured(self) -> None:
        featured = set(self.featured_ids)
        for tool in self.tools:
            tool.featured = tool.id in featured

    def _save_featured(self) -> None:
        self.store.write(FEATURED_KEY, self.featured_ids)

    def _save_prompts(self) -> None:
        self.store.write(PROMPTS_KEY, [p.model_dump() for p in self.prompts])

    # Tools

    def get_tool(self, tool_id: str) -> Tool:
        for tool in self.tools:
            if tool.id == tool_id:
                return tool
        raise ToolNotFoundError(tool_id)

    def is_featured(self, tool_id: str) -> bool:
        return tool_id in self.featured_ids

    def featured_tools(self) -> List[Tool]:
        return [t for t in self.tools if t.id in self.featured_ids]

    def categories(self) -> List[str]:
        return categories_of(self.tools)

    def visible_tools(self, query: str = "", category: Optional[str] = ALL, sort_by: str = "newest") -> List[Tool]:
        matched = filter_tools(self.tools, query=query, category=category)
        return sort_tools(matched, sort_by=sort_by, featured_ids=set(self.featured_ids))

    def view(
        self,
        query: str = "",
        category: Optional[str] = ALL,
        sort_by: str = "newest",
        page: int = 1,
        per_page=DEFAULT_PER_PAGE,
    ) -> Page:
        return paginate(self.visible_tools(query, category, sort_by), page=page, per_page=per_page)

    async def add_tool(
        self,
        name: str,
        url: str,
        description: str = "",
        category: str = "Other",
        image_url: str = "",
        paid: bool = False,
        featured: bool = False,
    ) -> Tool:
        try:
            tool = Tool(
                name=name,
                url=url,
                description=description,
                category=category or "Other",
                image_url=image_url,
                paid=paid,
                featured=featured,
            )
        except ValidationError as e:
            raise ToolValidationError(fields=_invalid_fields(e)) from e

        tool = await self.source.add_tool(tool)
        self.tools.append(tool)
        if featured and tool.id not in self.featured_ids:
            self.featured_ids.append(tool.id)
            self._save_featured()
        logger.info(f"Added tool {tool.name} ({tool.id})")
        return tool

    async def update_tool(self, tool_id: str, **changes) -> Tool:
        current = self.get_tool(tool_id)
        changes.pop("id", None)
        try:
            updated = Tool(**{**current.model_dump(), **changes})
        except ValidationError as e:
            raise ToolValidationError(fields=_invalid_fields(e)) from e

        self.tools[self.tools.index(current)] = updated
        if "featured" in changes:
            self._set_featured(tool_id, updated.featured)
        normalized = {k: getattr(updated, k) for k in changes if k in Tool.model_fields}
        await self.source.update_tool(tool_id, normalized)
        return updated

    async def delete_tool(self, tool_id: str) -> None:
        tool = self.get_tool(tool_id)
        self.tools.remove(tool)
        if tool_id in self.featured_ids:
            self.featured_ids.remove(tool_id)
            self._save_featured()
        await self.source.delete_tool(tool_id)
        logger.info(f"Deleted tool {tool.name} ({tool_id})")

    def _set_featured(self, tool_id: str, featured: bool) -> None:
        if featured and tool_id not in self.featured_ids:
            self.featured_ids.append(tool_id)
        elif not featured and tool_id in self.featured_ids:
            self.featured_ids.remove(tool_id)
        self._apply_featured()
        self._save_featured()

    async def toggle_featured(self, tool_id: str) -> bool:
        """Flip a tool's featured state. Returns the new state."""
        tool = self.get_tool(tool_id)
        featured = tool_id not in self.featured_ids
        self._set_featured(tool_id, featured)
        await self.source.update_tool(tool_id, {"featured": featured})
        logger.info(f"{'Featured' if featured else 'Unfeatured'} {tool.name}")
        return featured

    # Prompts

    def list_prompts(self, category: Optional[str] = ALL) -> List[Prompt]:
        return filter_prompts(self.prompts, category)

    def add_prompt(self, title: str, content: str, category: str = "Writing", model: str = "") -> Prompt:
        try:
            prompt = Prompt(title=title, content=content, category=category or "Writing", model=model or "")
        except ValidationError as e:
            raise ToolValidationError("Please fill out all fields.", fields=_invalid_fields(e)) from e
        self.prompts.append(prompt)
        self._save_prompts()
        return prompt

    def delete_prompt(self, prompt_id: str) -> None:
        remaining = [p for p in self.prompts if p.id != prompt_id]
        if len(remaining) == len(self.prompts):
            raise PromptNotFoundError(prompt_id)
        self.prompts = remaining
        self._save_prompts()
