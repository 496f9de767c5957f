import asyncio

import httpx
import pytest

from ai_tools_directory.data_manager import LocalToolSource
from ai_tools_directory.data_manager import SheetyToolSource
from ai_tools_directory.directory import ToolDirectory
from ai_tools_directory.errors import PromptNotFoundError
from ai_tools_directory.errors import ToolNotFoundError
from ai_tools_directory.errors import ToolValidationError
from ai_tools_directory.models import Tool
from ai_tools_directory.sheety import SheetyClient
from ai_tools_directory.storage import FEATURED_KEY
from ai_tools_directory.storage import PROMPTS_KEY


class MemorySource:
    """Tool source that records the writes it receives."""

    name = "memory"

    def __init__(self, tools):
        self._tools = tools
        self.updates = []
        self.deleted = []

    async def list_tools(self):
        return [t.model_copy() for t in self._tools]

    async def add_tool(self, tool):
        return tool

    async def update_tool(self, tool_id, changes):
        self.updates.append((tool_id, changes))

    async def delete_tool(self, tool_id):
        self.deleted.append(tool_id)


def _load(directory):
    asyncio.run(directory.load())
    return directory


@pytest.fixture
def source():
    return MemorySource(
        [
            Tool(id="1", name="ChatGPT", description="Chat assistant", category="AI", url="chat.openai.com"),
            Tool(id="2", name="Midjourney", description="Images", category="Image", url="midjourney.com", featured=True),
            Tool(id="3", name="Copilot", description="Code completion", category="Code", url="github.com/copilot"),
        ]
    )


@pytest.fixture
def directory(source, store):
    return _load(ToolDirectory(source=source, store=store))


def test_featured_ids_seeded_from_tool_flags(directory):
    assert directory.featured_ids == ["2"]
    assert directory.is_featured("2")


def test_saved_featured_ids_take_precedence(source, store):
    store.write(FEATURED_KEY, ["3"])
    directory = _load(ToolDirectory(source=source, store=store))
    assert [t.id for t in directory.featured_tools()] == ["3"]
    assert directory.get_tool("2").featured is False


def test_view_filters_sorts_and_paginates(directory):
    page = directory.view(query="", sort_by="newest", per_page=2)
    assert [t.id for t in page.items] == ["2", "3"]
    assert page.total == 3
    assert page.total_pages == 2

    searched = directory.view(query="CHAT")
    assert [t.id for t in searched.items] == ["1"]


def test_add_tool_rejects_empty_name_or_url(directory):
    with pytest.raises(ToolValidationError) as excinfo:
        asyncio.run(directory.add_tool(name="", url="example.com"))
    assert excinfo.value.fields == ["name"]

    with pytest.raises(ToolValidationError):
        asyncio.run(directory.add_tool(name="Example", url=""))
    assert len(directory.tools) == 3


def test_add_tool_appends_and_features(directory, store):
    tool = asyncio.run(directory.add_tool(name="Suno", url="suno.com", category="", featured=True))
    assert tool.url == "https://suno.com"
    assert tool.category == "Other"
    assert directory.tools[-1] is tool
    assert store.read(FEATURED_KEY) == ["2", tool.id]


def test_toggle_featured_twice_restores_state(directory, source, store):
    assert asyncio.run(directory.toggle_featured("1")) is True
    assert directory.view().items[0].featured
    assert asyncio.run(directory.toggle_featured("1")) is False

    assert directory.featured_ids == ["2"]
    assert store.read(FEATURED_KEY) == ["2"]
    assert source.updates == [("1", {"featured": True}), ("1", {"featured": False})]


def test_toggle_unknown_tool(directory):
    with pytest.raises(ToolNotFoundError):
        asyncio.run(directory.toggle_featured("nope"))


def test_update_tool_normalizes_changes(directory, source):
    updated = asyncio.run(directory.update_tool("1", url="openai.com", featured=True))
    assert updated.url == "https://openai.com"
    assert directory.is_featured("1")
    assert source.updates == [("1", {"url": "https://openai.com", "featured": True})]


def test_update_tool_validates(directory):
    with pytest.raises(ToolValidationError):
        asyncio.run(directory.update_tool("1", name=" "))
    assert directory.get_tool("1").name == "ChatGPT"


def test_delete_tool_drops_featured_id(directory, source, store):
    asyncio.run(directory.delete_tool("2"))
    assert [t.id for t in directory.tools] == ["1", "3"]
    assert store.read(FEATURED_KEY) == []
    assert source.deleted == ["2"]
    with pytest.raises(ToolNotFoundError):
        asyncio.run(directory.delete_tool("2"))


def test_categories_in_first_seen_order(directory):
    assert directory.categories() == ["AI", "Image", "Code"]


def test_prompts_lifecycle(directory, store, source):
    prompt = directory.add_prompt(title="Summarize", content="Summarize this text", category="Analysis")
    directory.add_prompt(title="Tagline", content="Write a tagline", category="Business", model="gpt-4o")
    assert [p.title for p in directory.list_prompts("Analysis")] == ["Summarize"]
    assert len(store.read(PROMPTS_KEY)) == 2

    reloaded = _load(ToolDirectory(source=source, store=store))
    assert [p.title for p in reloaded.list_prompts()] == ["Summarize", "Tagline"]

    directory.delete_prompt(prompt.id)
    assert [p["title"] for p in store.read(PROMPTS_KEY)] == ["Tagline"]
    with pytest.raises(PromptNotFoundError):
        directory.delete_prompt(prompt.id)


def test_add_prompt_requires_title_and_content(directory):
    with pytest.raises(ToolValidationError):
        directory.add_prompt(title="", content="text")
    with pytest.raises(ToolValidationError):
        directory.add_prompt(title="Title", content="  ")


def test_local_source_persists_across_reloads(store):
    directory = _load(ToolDirectory(source=LocalToolSource(store), store=store))
    tool = asyncio.run(directory.add_tool(name="Suno", url="suno.com"))
    asyncio.run(directory.toggle_featured(tool.id))

    reloaded = _load(ToolDirectory(source=LocalToolSource(store), store=store))
    assert reloaded.get_tool(tool.id).featured is True
    assert reloaded.view(sort_by="newest").items[0].id == tool.id


def test_failed_remote_writes_keep_local_changes(store):
    rows = [{"id": 1, "name": "ChatGPT", "url": "chat.openai.com"}, {"id": 2, "name": "Runway", "url": "runwayml.com"}]

    def handler(request):
        if request.method == "GET":
            return httpx.Response(200, json={"tools": rows})
        return httpx.Response(500)

    source = SheetyToolSource(SheetyClient("https://sheety.test/tools", transport=httpx.MockTransport(handler)))
    directory = _load(ToolDirectory(source=source, store=store))

    tool = asyncio.run(directory.add_tool(name="Suno", url="suno.com"))
    assert asyncio.run(directory.toggle_featured("1")) is True
    asyncio.run(directory.update_tool("2", description="Video generation"))
    asyncio.run(directory.delete_tool(tool.id))

    assert [t.id for t in directory.view().items] == ["1", "2"]
    assert directory.get_tool("2").description == "Video generation"
    assert store.read(FEATURED_KEY) == ["1"]
