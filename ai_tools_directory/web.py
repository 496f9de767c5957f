import logging
import os
from pathlib import Path
from typing import Dict
from typing import List
from typing import Optional
from urllib.parse import quote
from urllib.parse import urlencode

from fasthtml.common import H1
from fasthtml.common import H2
from fasthtml.common import H3
from fasthtml.common import H5
from fasthtml.common import A
from fasthtml.common import Body
from fasthtml.common import Button
from fasthtml.common import Div
from fasthtml.common import Form
from fasthtml.common import Head
from fasthtml.common import Html
from fasthtml.common import Input
from fasthtml.common import Label
from fasthtml.common import Li
from fasthtml.common import Meta
from fasthtml.common import Nav
from fasthtml.common import Option
from fasthtml.common import P
from fasthtml.common import Section
from fasthtml.common import Select
from fasthtml.common import Span
from fasthtml.common import StyleX
from fasthtml.common import Textarea
from fasthtml.common import Title
from fasthtml.common import Ul
from fasthtml.common import to_xml
from fasthtml.fastapp import fast_app
from starlette.responses import HTMLResponse
from starlette.responses import RedirectResponse

from ai_tools_directory import config
from ai_tools_directory.catalog import ALL
from ai_tools_directory.catalog import DEFAULT_PER_PAGE
from ai_tools_directory.catalog import Page
from ai_tools_directory.catalog import page_numbers
from ai_tools_directory.catalog import parse_page
from ai_tools_directory.catalog import parse_per_page
from ai_tools_directory.directory import ToolDirectory
from ai_tools_directory.errors import PromptNotFoundError
from ai_tools_directory.errors import ToolNotFoundError
from ai_tools_directory.errors import ToolValidationError
from ai_tools_directory.logging_config import setup_logging
from ai_tools_directory.models import PER_PAGE_OPTIONS
from ai_tools_directory.models import PROMPT_CATEGORIES
from ai_tools_directory.models import TOOL_CATEGORIES
from ai_tools_directory.models import Prompt
from ai_tools_directory.models import Tool

setup_logging(config.log_level())

logger = logging.getLogger(__name__)

STYLES = Path(__file__).parent / "static" / "styles.css"
SORT_LABELS = {"newest": "Newest", "oldest": "Oldest", "name": "Name (A-Z)"}
DEFAULT_VIEW = {"q": "", "category": ALL, "sort": "newest", "page": "1", "per_page": str(DEFAULT_PER_PAGE)}

# Directory state shared by all requests, loaded on first use
_directory: Optional[ToolDirectory] = None


async def get_directory() -> ToolDirectory:
    global _directory
    if _directory is None:
        directory = ToolDirectory()
        await directory.load()
        _directory = directory
    return _directory


def reset_directory() -> None:
    global _directory
    _directory = None


def path_url(path: str) -> str:
    """Prefix path with BASE_PATH for subdirectory deployment"""
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{config.base_path()}{path}"


def view_url(params: Dict[str, str], **overrides) -> str:
    """Homepage link carrying only the non-default view parameters."""
    merged = {**params, **{k: str(v) for k, v in overrides.items()}}
    query = {k: v for k, v in merged.items() if v and v != DEFAULT_VIEW.get(k)}
    return path_url("/") + (f"?{urlencode(query)}" if query else "")


def safe_return(next_url: str) -> str:
    """Only relative homepage queries are accepted as redirect targets."""
    if next_url and next_url.startswith("?"):
        return path_url("/") + next_url
    return path_url("/")


def _checked(value: str) -> bool:
    return (value or "").lower() in ("on", "true", "1", "yes")


# Components
def layout(title: str, *content):
    return Html(
        Head(
            Title(title),
            Meta({"charset": "utf-8"}),
            Meta({"name": "viewport", "content": "width=device-width, initial-scale=1"}),
            Meta({"name": "description", "content": "Search and save the AI tools you use."}),
            StyleX(str(STYLES)),
        ),
        Body(*content),
    )


def nav_tabs(active: str):
    return Nav(
        A("Tools", href=path_url("/"), _class="active" if active == "tools" else ""),
        A("Prompts", href=path_url("/prompts"), _class="active" if active == "prompts" else ""),
        _class="nav-tabs",
    )


def prompt_item(prompt: Prompt, next_url: str = ""):
    return Div(
        P(Span(prompt.title, _class="prompt-title")),
        P(prompt.content, _class="prompt-content"),
        P(f"Model: {prompt.model or 'N/A'}", _class="count"),
        Span(prompt.category, _class="badge"),
        Form(
            Input(type="hidden", name="next_url", value=next_url),
            Button("Delete", type="submit"),
            method="post",
            action=path_url(f"/prompts/{quote(prompt.id, safe='')}/delete"),
        ),
        _class="prompt-item",
    )


def sidebar(directory: ToolDirectory, params: Dict[str, str]):
    categories = list(TOOL_CATEGORIES)
    for category in directory.categories():
        if category not in categories:
            categories.append(category)

    links = [
        Li(
            A(
                category,
                href=view_url(params, category=category, page=1),
                _class="active" if params["category"] == category else "",
            )
        )
        for category in categories
    ]
    return Div(
        H2("Saved Prompts"),
        *[prompt_item(p) for p in directory.list_prompts()],
        A("+ Add prompt", href=path_url("/prompts")),
        H3("Categories"),
        Ul(*links, _class="category-list"),
        _class="sidebar",
    )


def tool_card(tool: Tool, next_url: str):
    featured_label = "⭐ Featured" if tool.featured else "☆ Feature"
    return Div(
        Span("Paid", _class="badge paid") if tool.paid else "",
        H5(tool.name),
        P(tool.description or "No description available"),
        Span(tool.category, _class="badge"),
        Div(
            A({"href": tool.url, "target": "_blank", "rel": "noopener noreferrer"}, "Open"),
            Form(
                Input(type="hidden", name="next_url", value=next_url),
                Button(featured_label, type="submit", title="Toggle featured"),
                method="post",
                action=path_url(f"/tools/{quote(tool.id, safe='')}/feature"),
            ),
            Form(
                Input(type="hidden", name="next_url", value=next_url),
                Button("Delete", type="submit"),
                method="post",
                action=path_url(f"/tools/{quote(tool.id, safe='')}/delete"),
            ),
            _class="tool-actions",
        ),
        _class="tool-card featured" if tool.featured else "tool-card",
    )


def toolbar(params: Dict[str, str]):
    return Form(
        Input({"type": "search", "name": "q", "value": params["q"], "placeholder": "Search tools..."}),
        Input(type="hidden", name="category", value=params["category"]),
        Select(
            *[Option(label, value=key, selected=params["sort"] == key) for key, label in SORT_LABELS.items()],
            name="sort",
        ),
        Label("Show:", _for="per_page"),
        Select(
            *[Option(str(opt), value=str(opt), selected=params["per_page"] == str(opt)) for opt in PER_PAGE_OPTIONS],
            name="per_page",
            id="per_page",
        ),
        Button("Search", type="submit"),
        method="get",
        action=path_url("/"),
        _class="toolbar",
    )


def add_tool_form(values: Optional[Dict[str, str]] = None, error: str = ""):
    values = values or {}
    categories = [c for c in TOOL_CATEGORIES if c != ALL]
    return Form(
        H3("Add a new AI tool"),
        P(error, _class="form-error") if error else "",
        Input(type="text", name="name", placeholder="Tool name", value=values.get("name", "")),
        Textarea(values.get("description", ""), name="description", placeholder="Description"),
        Input(type="text", name="url", placeholder="Tool URL", value=values.get("url", "")),
        Input(type="text", name="image_url", placeholder="Image URL (optional)", value=values.get("image_url", "")),
        Select(
            *[Option(c, value=c, selected=values.get("category", "AI") == c) for c in categories],
            name="category",
        ),
        Label(Input(type="checkbox", name="paid", checked=_checked(values.get("paid", ""))), " Paid tool"),
        Label(Input(type="checkbox", name="featured", checked=_checked(values.get("featured", ""))), " Featured"),
        Button("Save", type="submit", _class="primary"),
        method="post",
        action=path_url("/tools"),
        _class="add-form",
    )


def pagination_nav(page: Page, params: Dict[str, str]):
    numbers = page_numbers(page.page, page.total_pages)
    if not numbers:
        return ""
    items = []
    if page.has_prev:
        items.append(A("Previous", href=view_url(params, page=page.page - 1)))
    for number in numbers:
        if number == "...":
            items.append(Span("..."))
        elif number == page.page:
            items.append(Span(str(number), _class="current"))
        else:
            items.append(A(str(number), href=view_url(params, page=number)))
    if page.has_next:
        items.append(A("Next", href=view_url(params, page=page.page + 1)))
    return Nav(*items, _class="pagination")


def tools_page(directory: ToolDirectory, params: Dict[str, str], form_values=None, error: str = ""):
    page = directory.view(
        query=params["q"],
        category=params["category"],
        sort_by=params["sort"],
        page=parse_page(params["page"]),
        per_page=parse_per_page(params["per_page"]),
    )
    # Keep the view after form posts
    current = view_url(params, page=page.page)
    next_url = current[len(path_url("/")) :]

    cards = [tool_card(tool, next_url) for tool in page.items]
    listing = Section(
        Span(f"{page.total} tools", _class="count"),
        Div(*cards, _class="tools-grid") if cards else P("No tools match your search.", _class="intro"),
        pagination_nav(page, params),
    )
    return layout(
        "AI Tools Directory",
        Div(
            sidebar(directory, params),
            Div(
                nav_tabs("tools"),
                H1("AI Tools Directory", _class="window-title"),
                P("Discover and save the AI tools you use.", _class="intro"),
                toolbar(params),
                add_tool_form(form_values, error),
                listing,
                _class="main",
            ),
            _class="layout",
        ),
    )


def prompts_page(directory: ToolDirectory, category: str, form_values=None, error: str = ""):
    form_values = form_values or {}
    next_url = f"?{urlencode({'category': category})}" if category != ALL else ""
    filters = []
    for c in PROMPT_CATEGORIES:
        href = path_url("/prompts") + (f"?{urlencode({'category': c})}" if c != ALL else "")
        filters.append(A(c, href=href, _class="active" if c == category else ""))
    form = Form(
        H3("Save a prompt"),
        P(error, _class="form-error") if error else "",
        Input(type="text", name="title", placeholder="Title", value=form_values.get("title", "")),
        Textarea(form_values.get("content", ""), name="content", placeholder="Prompt"),
        Input(type="text", name="model", placeholder="Model (optional)", value=form_values.get("model", "")),
        Select(
            *[
                Option(c, value=c, selected=form_values.get("category", "Writing") == c)
                for c in PROMPT_CATEGORIES
                if c != ALL
            ],
            name="category",
        ),
        Button("Save", type="submit", _class="primary"),
        method="post",
        action=path_url("/prompts"),
        _class="add-form",
    )
    prompts = directory.list_prompts(category)
    return layout(
        "Saved Prompts - AI Tools Directory",
        Div(
            Div(
                nav_tabs("prompts"),
                H1("Saved Prompts", _class="window-title"),
                Nav(*filters, _class="nav-tabs"),
                form,
                Span(f"{len(prompts)} prompts", _class="count"),
                *[prompt_item(p, next_url) for p in prompts],
                _class="main",
            ),
            _class="layout",
        ),
    )


def not_found(message: str) -> HTMLResponse:
    return HTMLResponse(to_xml(layout("Not Found", H1("Not Found"), P(message))), status_code=404)


def _view_params(q: str, category: str, sort: str, page: str, per_page: str) -> Dict[str, str]:
    return {
        "q": q or "",
        "category": category or ALL,
        "sort": sort or "newest",
        "page": str(parse_page(page)),
        "per_page": str(parse_per_page(per_page)),
    }


# App setup
app, rt = fast_app(static_path=str(Path(__file__).parent / "static"))


@rt("/", methods=["get"])
async def home(q: str = "", category: str = ALL, sort: str = "newest", page: str = "1", per_page: str = "20"):
    directory = await get_directory()
    return tools_page(directory, _view_params(q, category, sort, page, per_page))


@rt("/tools", methods=["post"])
async def create_tool(
    name: str = "",
    description: str = "",
    category: str = "AI",
    url: str = "",
    image_url: str = "",
    paid: str = "",
    featured: str = "",
):
    directory = await get_directory()
    try:
        await directory.add_tool(
            name=name,
            url=url,
            description=description,
            category=category,
            image_url=image_url,
            paid=_checked(paid),
            featured=_checked(featured),
        )
    except ToolValidationError as e:
        logger.info(f"Rejected tool submission: missing {', '.join(e.fields)}")
        values = {
            "name": name,
            "description": description,
            "category": category,
            "url": url,
            "image_url": image_url,
            "paid": paid,
            "featured": featured,
        }
        page = tools_page(directory, dict(DEFAULT_VIEW), values, e.message)
        return HTMLResponse(to_xml(page), status_code=400)
    return RedirectResponse(path_url("/"), status_code=303)


@rt("/tools/{tool_id:path}/feature", methods=["post"])
async def feature_tool(tool_id: str, next_url: str = ""):
    directory = await get_directory()
    try:
        await directory.toggle_featured(tool_id)
    except ToolNotFoundError as e:
        return not_found(str(e))
    return RedirectResponse(safe_return(next_url), status_code=303)


@rt("/tools/{tool_id:path}/delete", methods=["post"])
async def remove_tool(tool_id: str, next_url: str = ""):
    directory = await get_directory()
    try:
        await directory.delete_tool(tool_id)
    except ToolNotFoundError as e:
        return not_found(str(e))
    return RedirectResponse(safe_return(next_url), status_code=303)


@rt("/prompts", methods=["get"])
async def list_prompts(category: str = ALL):
    directory = await get_directory()
    return prompts_page(directory, category or ALL)


@rt("/prompts", methods=["post"])
async def create_prompt(title: str = "", content: str = "", category: str = "Writing", model: str = ""):
    directory = await get_directory()
    try:
        directory.add_prompt(title=title, content=content, category=category, model=model)
    except ToolValidationError as e:
        values = {"title": title, "content": content, "category": category, "model": model}
        return HTMLResponse(to_xml(prompts_page(directory, ALL, values, e.message)), status_code=400)
    return RedirectResponse(path_url("/prompts"), status_code=303)


@rt("/prompts/{prompt_id}/delete", methods=["post"])
async def remove_prompt(prompt_id: str, next_url: str = ""):
    directory = await get_directory()
    try:
        directory.delete_prompt(prompt_id)
    except PromptNotFoundError as e:
        return not_found(str(e))
    target = path_url("/prompts") + next_url if next_url.startswith("?") else path_url("/prompts")
    return RedirectResponse(target, status_code=303)


@rt("/api/tools", methods=["get"])
async def api_tools(q: str = "", category: str = ALL, sort: str = "newest"):
    directory = await get_directory()
    tools: List[Tool] = directory.visible_tools(q, category or ALL, sort or "newest")
    return {"tools": [t.model_dump() for t in tools]}


@rt("/refresh", methods=["post"])
async def refresh():
    directory = await get_directory()
    await directory.load()
    return RedirectResponse(path_url("/"), status_code=303)


@rt("/health")
def health():
    return {"status": "ok"}


# For direct script execution
if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("WEB_PORT", "8000"))
    logger.info(f"Starting server on port {port}")
    uvicorn.run("ai_tools_directory.web:app", host="0.0.0.0", port=port, reload=True)
