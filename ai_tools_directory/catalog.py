"""Search, sort and pagination over the tool list."""

import math
from dataclasses import dataclass
from dataclasses import field
from typing import Iterable
from typing import List
from typing import Optional
from typing import Sequence
from typing import Union

from ai_tools_directory.models import Prompt
from ai_tools_directory.models import Tool

DEFAULT_PER_PAGE = 20
ALL = "All"

PerPage = Union[int, str]


@dataclass
class Page:
    """One page of a filtered and sorted listing."""

    items: List = field(default_factory=list)
    page: int = 1
    per_page: PerPage = DEFAULT_PER_PAGE
    total: int = 0
    total_pages: int = 1

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def start(self) -> int:
        """Zero-based index of the first item on this page."""
        if self.per_page == ALL:
            return 0
        return (self.page - 1) * self.per_page


def matches_query(tool: Tool, query: str) -> bool:
    needle = (query or "").strip().lower()
    if not needle:
        return True
    return any(needle in (value or "").lower() for value in (tool.name, tool.description, tool.category))


def filter_tools(tools: Iterable[Tool], query: str = "", category: Optional[str] = ALL) -> List[Tool]:
    """Keep tools matching the search query and category."""
    wanted = (category or ALL).strip()
    result = []
    for tool in tools:
        if wanted != ALL and tool.category.lower() != wanted.lower():
            continue
        if matches_query(tool, query):
            result.append(tool)
    return result


def sort_tools(tools: Sequence[Tool], sort_by: str = "newest", featured_ids=None) -> List[Tool]:
    """Sort tools with featured ones first.

    ``featured_ids`` overrides each tool's own ``featured`` flag when given.
    Unknown sort keys leave insertion order untouched.
    """
    ordered = list(tools)
    if sort_by == "newest":
        ordered.reverse()
    elif sort_by == "name":
        ordered.sort(key=lambda t: t.name.casefold())

    def is_featured(tool: Tool) -> bool:
        if featured_ids is None:
            return tool.featured
        return tool.id in featured_ids

    # Stable sort keeps the mode ordering inside each partition
    ordered.sort(key=lambda t: not is_featured(t))
    return ordered


def parse_per_page(value) -> PerPage:
    if isinstance(value, str) and value.strip().lower() == ALL.lower():
        return ALL
    try:
        number = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PER_PAGE
    return number if number > 0 else DEFAULT_PER_PAGE


def parse_page(value) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 1
    return max(1, number)


def paginate(items: Sequence, page: int = 1, per_page: PerPage = DEFAULT_PER_PAGE) -> Page:
    """Slice ``items`` into the requested page, clamping out-of-range pages."""
    per_page = parse_per_page(per_page)
    total = len(items)
    if per_page == ALL:
        return Page(items=list(items), page=1, per_page=ALL, total=total, total_pages=1)

    total_pages = max(1, math.ceil(total / per_page))
    page = min(max(1, parse_page(page)), total_pages)
    start = (page - 1) * per_page
    return Page(
        items=list(items[start : start + per_page]),
        page=page,
        per_page=per_page,
        total=total,
        total_pages=total_pages,
    )


def page_numbers(current: int, total_pages: int, window: int = 2) -> List[Union[int, str]]:
    """Page buttons to render: first, last and a window around the current page."""
    if total_pages <= 1:
        return []
    pages = {1, total_pages}
    for number in range(max(2, current - window), min(total_pages - 1, current + window) + 1):
        pages.add(number)

    result: List[Union[int, str]] = []
    last = None
    for number in sorted(pages):
        if last is not None and number - last > 1:
            result.append("...")
        result.append(number)
        last = number
    return result


def filter_prompts(prompts: Iterable[Prompt], category: Optional[str] = ALL) -> List[Prompt]:
    wanted = (category or ALL).strip()
    if wanted == ALL:
        return list(prompts)
    return [p for p in prompts if p.category.lower() == wanted.lower()]


def categories_of(tools: Iterable[Tool]) -> List[str]:
    """Distinct categories in first-seen order."""
    seen = []
    for tool in tools:
        if tool.category and tool.category not in seen:
            seen.append(tool.category)
    return seen
