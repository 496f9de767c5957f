import asyncio
import logging

import httpx

from ai_tools_directory.data_manager import load_tools
from ai_tools_directory.data_manager import save_tools
from ai_tools_directory.defaults import DEFAULT_TOOLS
from ai_tools_directory.logging_utils import SUMMARY_PREFIX
from ai_tools_directory.maintenance import deduplicate_database
from ai_tools_directory.maintenance import deduplicate_tools
from ai_tools_directory.maintenance import import_sheet

SHEET_CSV = (
    "Name,Description,Category,Image Link,Tool Link,Featured\n"
    "ChatGPT Plus,Duplicate by name,AI,,https://other.example,FALSE\n"
    "Suno,Music generation,Voice,,suno.com,TRUE\n"
    "Udio,Music generation,Voice,,udio.com,\n"
)


def test_deduplicate_by_url_and_name():
    tools = [
        {"name": "Runway", "url": "https://runwayml.com"},
        {"name": "Runway Gen-3", "url": "https://runwayml.com/gen3"},
        {"name": "Other", "url": "https://runwayml.com"},
        {"name": "Pika", "url": "https://pika.art"},
    ]
    assert [t["name"] for t in deduplicate_tools(tools)] == ["Runway", "Pika"]


def test_deduplicate_against_existing():
    existing = [{"name": "Suno", "url": "https://suno.com"}]
    new = [{"name": "suno", "url": "https://suno.ai"}, {"name": "Udio", "url": "https://udio.com"}]
    assert [t["name"] for t in deduplicate_tools(new, existing=existing)] == ["Udio"]


def test_placeholder_urls_do_not_collide():
    tools = [{"name": "Alpha", "url": "#"}, {"name": "Bravo", "url": "#"}]
    assert len(deduplicate_tools(tools)) == 2


def test_import_sheet_appends_new_tools(caplog):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text=SHEET_CSV))
    with caplog.at_level(logging.INFO):
        added = asyncio.run(import_sheet("sheet123", "Tools", transport=transport))

    assert added == 2
    names = [t["name"] for t in load_tools()["tools"]]
    assert names[-2:] == ["Suno", "Udio"]
    assert len(names) == len(DEFAULT_TOOLS) + 2
    summary = [r.getMessage() for r in caplog.records if SUMMARY_PREFIX in r.getMessage()][-1]
    assert '"tools_added": 2' in summary
    assert '"sheet_id": "sheet123"' in summary
    assert '"sheet_name": "Tools"' in summary


def test_import_sheet_survives_network_failure(caplog):
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    with caplog.at_level(logging.INFO):
        assert asyncio.run(import_sheet("sheet123", transport=transport)) == 0
    assert any(r.levelno == logging.WARNING and "no rows" in r.getMessage() for r in caplog.records)
    assert len(load_tools()["tools"]) == len(DEFAULT_TOOLS)


def test_deduplicate_database():
    data = load_tools()
    data["tools"].append(dict(data["tools"][0], id="dupe"))
    save_tools(data)

    assert deduplicate_database() == 1
    assert "dupe" not in [t["id"] for t in load_tools()["tools"]]
