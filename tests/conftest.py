import pytest

from ai_tools_directory.storage import LocalStore
from ai_tools_directory.storage import reset_store


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point every store and cache at a temporary directory."""
    monkeypatch.setenv("AITOOLS_STORAGE_BACKEND", "local")
    monkeypatch.setenv("AITOOLS_TOOLS_SOURCE", "local")
    monkeypatch.setenv("AITOOLS_LOCAL_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("AITOOLS_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.delenv("BASE_PATH", raising=False)
    reset_store()
    yield tmp_path
    reset_store()


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / "store")
