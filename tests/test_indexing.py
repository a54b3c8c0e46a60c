from datetime import datetime, timezone

import pytest

from loghook.context import CancelContext
from loghook.errors import CannotCreateIndexError, ErrorKind
from loghook.opensearch.indexing import as_resolver, dated_index, ensure_index, static_index
from loghook.opensearch.mappings import LOG_INDEX_BODY


def test_static_index_is_constant():
    resolve = static_index("logs")
    assert resolve() == "logs"
    assert resolve() == "logs"


def test_dated_index_uses_clock_on_every_call():
    days = iter([
        datetime(2024, 1, 31, 23, 59, tzinfo=timezone.utc),
        datetime(2024, 2, 1, 0, 0, tzinfo=timezone.utc),
    ])
    resolve = dated_index("logs", clock=lambda: next(days))
    assert resolve() == "logs-2024.01.31"
    assert resolve() == "logs-2024.02.01"


def test_as_resolver_accepts_str_and_callable():
    assert as_resolver("abc")() == "abc"
    fn = lambda: "dyn"
    assert as_resolver(fn) is fn
    with pytest.raises(TypeError):
        as_resolver(42)


def test_existing_index_is_not_created(make_client):
    client = make_client(exists=True)
    assert ensure_index(client, static_index("logs"), CancelContext()) is None
    assert client.indices.create_calls == []


def test_missing_index_is_created_with_mapping(make_client):
    client = make_client(exists=False, acknowledged=True)
    response = ensure_index(client, static_index("logs"), CancelContext())
    assert response["acknowledged"] is True
    assert client.indices.create_calls[0]["index"] == "logs"
    assert client.indices.create_calls[0]["body"] == LOG_INDEX_BODY


def test_unacknowledged_create_raises(make_client):
    client = make_client(exists=False, acknowledged=False)
    with pytest.raises(CannotCreateIndexError) as excinfo:
        ensure_index(client, static_index("logs"), CancelContext())
    assert excinfo.value.kind is ErrorKind.CANNOT_CREATE_INDEX
    assert excinfo.value.index == "logs"
    assert excinfo.value.response == {"acknowledged": False, "index": "logs"}


def test_backend_errors_propagate_unchanged(make_client):
    boom = ConnectionError("down")
    client = make_client(exists_error=boom)
    with pytest.raises(ConnectionError) as excinfo:
        ensure_index(client, static_index("logs"), CancelContext())
    assert excinfo.value is boom
