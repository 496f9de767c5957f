"""Built-in tool list used to seed an empty local store."""

from typing import List

from ai_tools_directory.models import Tool

DEFAULT_TOOLS = [
    {
        "id": "1700000000001",
        "name": "ChatGPT",
        "description": "Conversational assistant for writing, analysis and coding.",
        "category": "AI",
        "url": "https://chat.openai.com",
        "paid": False,
    },
    {
        "id": "1700000000002",
        "name": "Claude",
        "description": "Assistant for long documents, reasoning and drafting.",
        "category": "AI",
        "url": "https://claude.ai",
        "paid": False,
    },
    {
        "id": "1700000000003",
        "name": "Midjourney",
        "description": "Image generation from text prompts.",
        "category": "Image",
        "url": "https://www.midjourney.com",
        "paid": True,
    },
    {
        "id": "1700000000004",
        "name": "GitHub Copilot",
        "description": "Code completion and chat inside the editor.",
        "category": "Code",
        "url": "https://github.com/features/copilot",
        "paid": True,
    },
    {
        "id": "1700000000005",
        "name": "ElevenLabs",
        "description": "Text to speech and voice cloning.",
        "category": "Voice",
        "url": "https://elevenlabs.io",
        "paid": True,
    },
    {
        "id": "1700000000006",
        "name": "Runway",
        "description": "Video generation and editing tools.",
        "category": "Video",
        "url": "https://runwayml.com",
        "paid": True,
    },
    {
        "id": "1700000000007",
        "name": "Grammarly",
        "description": "Grammar, tone and clarity suggestions for writing.",
        "category": "Writing",
        "url": "https://www.grammarly.com",
        "paid": False,
    },
    {
        "id": "1700000000008",
        "name": "Perplexity",
        "description": "Answer engine that cites its sources.",
        "category": "AI",
        "url": "https://www.perplexity.ai",
        "paid": False,
    },
]


def default_tools() -> List[Tool]:
    return [Tool(**row) for row in DEFAULT_TOOLS]
