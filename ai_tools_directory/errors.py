"""Exceptions raised by the tools directory."""


class DirectoryError(Exception):
    """Base class for directory errors."""


class ToolValidationError(DirectoryError):
    """A tool or prompt failed validation (missing required fields)."""

    def __init__(self, message: str = "Please fill out all required fields.", fields=None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields or [])


class ToolNotFoundError(DirectoryError, KeyError):
    def __init__(self, tool_id: str):
        super().__init__(tool_id)
        self.tool_id = tool_id

    def __str__(self) -> str:
        return f"Tool not found: {self.tool_id}"


class PromptNotFoundError(DirectoryError, KeyError):
    def __init__(self, prompt_id: str):
        super().__init__(prompt_id)
        self.prompt_id = prompt_id

    def __str__(self) -> str:
        return f"Prompt not found: {self.prompt_id}"
