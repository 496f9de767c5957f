"""Tool and prompt models."""

import threading
import time
from typing import Optional
from urllib.parse import quote

from pydantic import BaseModel
from pydantic import Field
from pydantic import field_validator

TOOL_CATEGORIES = ["All", "AI", "Writing", "Image", "Code", "Voice", "Video", "Other"]
PROMPT_CATEGORIES = ["All", "Writing", "Analysis", "Creative", "Technical", "Business"]
SORT_MODES = ["newest", "oldest", "name"]
PER_PAGE_OPTIONS = [20, 50, 100, "All"]

_id_lock = threading.Lock()
_last_id = 0


def new_id() -> str:
    """Timestamp id in milliseconds, strictly increasing within the process."""
    global _last_id
    with _id_lock:
        candidate = int(time.time() * 1000)
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
        return str(candidate)


def normalize_url(url: str) -> str:
    """Ensure a URL carries a scheme."""
    url = (url or "").strip()
    if not url or url == "#":
        return url
    if "://" in url or url.startswith(("mailto:", "/")):
        return url
    return f"https://{url.lstrip('/')}"


def placeholder_image(seed: str) -> str:
    return f"https://picsum.photos/seed/{quote(seed or 'tool')}/500/300"


def _required(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("must not be empty")
    return value


class Tool(BaseModel):
    """A catalog entry linking to an external AI product."""

    id: str = Field(default_factory=new_id, description="Timestamp id or remote row id")
    name: str = Field(description="Display name of the tool")
    description: str = ""
    category: str = "Other"
    url: str = Field(description="Tool link, normalized to include a scheme")
    image_url: str = ""
    paid: bool = False
    featured: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return _required(value)

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        return normalize_url(_required(value))

    @field_validator("description", "category", "image_url", mode="before")
    @classmethod
    def _strip(cls, value):
        return (value or "").strip() if isinstance(value, str) or value is None else value

    @field_validator("category")
    @classmethod
    def _default_category(cls, value: str) -> str:
        return value or "Other"

    @property
    def image(self) -> str:
        return self.image_url or placeholder_image(self.name)


class Prompt(BaseModel):
    """A saved prompt snippet."""

    id: str = Field(default_factory=new_id)
    title: str
    content: str
    category: str = "Writing"
    model: Optional[str] = ""

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value)

    @field_validator("title", "content")
    @classmethod
    def _check_required(cls, value: str) -> str:
        return _required(value)
