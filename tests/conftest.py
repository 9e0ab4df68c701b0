"""Shared fakes for the watcher tests.

FakeStore records every call and remembers created keys, so a key reports as
existing after a successful create. InMemoryDirectory stands in for the
watched directory without touching disk.
"""

import pytest


class FakeStore:
    def __init__(self, existing=(), fail_creates=0):
        self.existing = set(existing)
        self.fail_creates = fail_creates
        self.exists_calls = []
        self.create_calls = []
        self.successful_creates = []

    def exists_input_config(self, cluster_name, service_key):
        self.exists_calls.append((cluster_name, service_key))
        return (cluster_name, service_key) in self.existing

    def create_input_config(self, cluster_name, service_key, content):
        self.create_calls.append((cluster_name, service_key, content))
        if self.fail_creates > 0:
            self.fail_creates -= 1
            raise ConnectionError("store unavailable")
        self.existing.add((cluster_name, service_key))
        self.successful_creates.append((cluster_name, service_key, content))


class InMemoryDirectory:
    def __init__(self, files=None, path="/conf"):
        self.path = path
        self.files = dict(files or {})
        self.unreadable = set()
        self.list_error = None
        self.read_calls = []

    def list_names(self):
        if self.list_error is not None:
            raise self.list_error
        return list(self.files)

    def read_text(self, name):
        self.read_calls.append(name)
        if name in self.unreadable:
            raise PermissionError(f"cannot read {name}")
        return self.files[name]

    def absolute_path(self, name):
        return f"{self.path}/{name}"


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def directory():
    return InMemoryDirectory()
