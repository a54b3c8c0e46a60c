import os
import sys
import threading

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
SRC_DIR = os.path.join(PROJECT_ROOT, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)


class StubIndices:
    def __init__(self, exists=False, acknowledged=True, exists_error=None, create_error=None):
        self._exists = exists
        self.acknowledged = acknowledged
        self.exists_error = exists_error
        self.create_error = create_error
        self.exists_calls = []
        self.create_calls = []
        self.templates = []

    def exists(self, index, ctx=None):
        self.exists_calls.append({"index": index, "ctx": ctx})
        if self.exists_error is not None:
            raise self.exists_error
        return self._exists

    def create(self, index, body=None, ctx=None):
        self.create_calls.append({"index": index, "body": body, "ctx": ctx})
        if self.create_error is not None:
            raise self.create_error
        return {"acknowledged": self.acknowledged, "index": index}

    def put_index_template(self, name, body, ctx=None):
        self.templates.append({"name": name, "body": body})
        return {"acknowledged": True}


class StubClient:
    """Records every write along with the cancellation state of its context."""

    def __init__(self, write_error=None, **indices_kwargs):
        self.indices = StubIndices(**indices_kwargs)
        self.write_error = write_error
        self.indexed = []
        self._lock = threading.Lock()

    def info(self, ctx=None):
        return {"version": {"number": "2.11.0"}}

    def index(self, index, body, doc_type=None, ctx=None, refresh=None):
        with self._lock:
            self.indexed.append({
                "index": index,
                "body": body,
                "doc_type": doc_type,
                "ctx": ctx,
                "cancelled": ctx.cancelled if ctx is not None else None,
            })
        if self.write_error is not None:
            raise self.write_error
        return {"result": "created"}


@pytest.fixture
def stub_client():
    return StubClient()


@pytest.fixture
def make_client():
    return StubClient
