import json

import pytest
from minio.error import S3Error

from ai_tools_directory.storage import LocalStore
from ai_tools_directory.storage import MinioStore
from ai_tools_directory.storage import get_store
from ai_tools_directory.storage import reset_store


def test_missing_key_returns_copy_of_default(store):
    default = {"tools": []}
    value = store.read("tools", default)
    value["tools"].append("x")
    assert default == {"tools": []}


def test_write_then_read(store):
    store.write("featured_tools", ["1", "2"])
    assert store.read("featured_tools", []) == ["1", "2"]
    assert json.loads(store.path("featured_tools").read_text()) == ["1", "2"]


def test_corrupt_file_is_reported(store):
    store.path("ai_prompts").parent.mkdir(parents=True, exist_ok=True)
    store.path("ai_prompts").write_text("{not json")
    with pytest.raises(json.JSONDecodeError):
        store.read("ai_prompts", [])


def test_get_store_uses_local_backend(isolated_env):
    store = get_store()
    assert isinstance(store, LocalStore)
    assert store.data_dir == isolated_env / "data"
    assert get_store() is store


def test_unknown_backend_is_rejected(monkeypatch):
    monkeypatch.setenv("AITOOLS_STORAGE_BACKEND", "floppy")
    reset_store()
    with pytest.raises(RuntimeError):
        get_store()


def test_minio_backend_requires_settings(monkeypatch):
    monkeypatch.setenv("AITOOLS_STORAGE_BACKEND", "minio")
    monkeypatch.delenv("MINIO_ENDPOINT", raising=False)
    reset_store()
    with pytest.raises(RuntimeError, match="MINIO_ENDPOINT"):
        get_store()


def _s3_error(code):
    return S3Error(
        code=code,
        message="simulated",
        resource="/aitools",
        request_id="req",
        host_id="host",
        response=None,
    )


class FakeObject:
    def __init__(self, data: bytes):
        self._data = data
        self.released = False

    def read(self):
        return self._data

    def close(self):
        pass

    def release_conn(self):
        self.released = True


class FakeMinio:
    def __init__(self):
        self.buckets = set()
        self.objects = {}

    def bucket_exists(self, name):
        return name in self.buckets

    def make_bucket(self, name):
        self.buckets.add(name)

    def put_object(self, bucket, key, data, length, content_type=None):
        self.objects[(bucket, key)] = data.read(length)

    def get_object(self, bucket, key):
        if (bucket, key) not in self.objects:
            raise _s3_error("NoSuchKey")
        return FakeObject(self.objects[(bucket, key)])


def test_minio_store_creates_bucket_and_round_trips():
    client = FakeMinio()
    store = MinioStore("minio:9000", "key", "secret", "aitools", client=client)
    assert "aitools" in client.buckets

    store.write("featured_tools", ["5"])
    assert ("aitools", "featured_tools.json") in client.objects
    assert store.read("featured_tools", []) == ["5"]


def test_minio_missing_object_returns_copy_of_default():
    store = MinioStore("minio:9000", "key", "secret", "aitools", client=FakeMinio())
    default = {"prompts": []}
    value = store.read("ai_prompts", default)
    assert value == default
    value["prompts"].append("x")
    assert default == {"prompts": []}


def test_minio_other_errors_are_raised():
    client = FakeMinio()
    store = MinioStore("minio:9000", "key", "secret", "aitools", client=client)

    def denied(bucket, key):
        raise _s3_error("AccessDenied")

    client.get_object = denied
    with pytest.raises(S3Error) as excinfo:
        store.read("featured_tools", [])
    assert excinfo.value.code == "AccessDenied"
