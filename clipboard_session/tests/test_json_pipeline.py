"""Tests for the JSON validate/format/minify pipeline."""

import json
import pytest
from unittest.mock import AsyncMock, Mock

from clipboard_session.core.entry_store import EntryListStore
from clipboard_session.core.host import HostError, LocalClipboardHost
from clipboard_session.core.json_pipeline import (
    VALIDATION_FAILED_MESSAGE,
    JsonPipelineAdapter,
    is_json_shaped,
    is_minified,
)
from clipboard_session.tests.factories import make_entry


@pytest.fixture
def host():
    return LocalClipboardHost()


@pytest.fixture
def pipeline(host, lock):
    store = EntryListStore(host, lock)
    adapter = JsonPipelineAdapter(host, store)
    store.validator = adapter.validate
    return adapter


def test_is_json_shaped():
    assert is_json_shaped('{"a": 1}') is True
    assert is_json_shaped("  [1, 2]\n") is True
    assert is_json_shaped("{broken]") is False
    assert is_json_shaped("hello") is False
    assert is_json_shaped("") is False
    # Bracket check only, validation decides
    assert is_json_shaped("{not json}") is True


def test_is_minified():
    compact = json.dumps({"user": {"id": 1, "roles": ["a", "b"]}}, separators=(",", ":"))
    pretty = json.dumps({"user": {"id": 1, "roles": ["a", "b"]}}, indent=2)

    assert is_minified(compact) is True
    assert is_minified(pretty) is False
    assert is_minified("{invalid") is False


def test_is_minified_threshold(host, lock):
    adapter = JsonPipelineAdapter(host, Mock(), minified_ratio=0.1)

    compact = json.dumps({"a": [1, 2, 3]}, separators=(",", ":"))

    assert adapter.is_minified(compact) is False


class TestValidate:
    """Validation always yields a renderable result."""

    @pytest.mark.asyncio
    async def test_valid(self, pipeline):
        result = await pipeline.validate('{"a":[1,2]}')

        assert result.is_valid is True
        assert result.parsed_value == {"a": [1, 2]}
        assert result.formatted_content == json.dumps({"a": [1, 2]}, indent=2)

    @pytest.mark.asyncio
    async def test_invalid(self, pipeline):
        result = await pipeline.validate("{invalid")

        assert result.is_valid is False
        assert result.error_message
        assert result.error_message.startswith("JSON Parse Error")
        assert result.line == 1

    @pytest.mark.asyncio
    async def test_transport_failure_synthesized(self, lock):
        host = Mock()
        host.validate_json = AsyncMock(side_effect=HostError("host gone"))
        adapter = JsonPipelineAdapter(host, Mock())

        result = await adapter.validate("{}")

        assert result.is_valid is False
        assert result.error_message == VALIDATION_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_dict_result_coerced(self):
        host = Mock()
        host.validate_json = AsyncMock(
            return_value={"is_valid": False, "error_message": "bad", "line": 2}
        )
        adapter = JsonPipelineAdapter(host, Mock())

        result = await adapter.validate("{")

        assert result.is_valid is False
        assert result.line == 2


class TestFormatAndMinify:
    """Format/minify write back through the edit path."""

    @pytest.mark.asyncio
    async def test_format_writes_selected_entry(self, pipeline, lock):
        pipeline.store.ingest_historical_batch([make_entry(1, '{"a":1}')])

        formatted = await pipeline.format('{"a":1}')

        assert formatted == '{\n  "a": 1\n}'
        assert pipeline.store.entries[0].content == formatted
        # Programmatic edits go through the edit path too
        assert lock.is_editing is True

    @pytest.mark.asyncio
    async def test_minify_writes_selected_entry(self, pipeline):
        pipeline.store.ingest_historical_batch([make_entry(1, '{\n  "a": 1\n}')])

        minified = await pipeline.minify('{\n  "a": 1\n}')

        assert minified == '{"a":1}'
        assert pipeline.store.entries[0].content == '{"a":1}'

    @pytest.mark.asyncio
    async def test_format_failure_leaves_buffer(self, pipeline, lock):
        pipeline.store.ingest_historical_batch([make_entry(1, "{invalid")])

        assert await pipeline.format("{invalid") is None
        assert await pipeline.minify("{invalid") is None

        assert pipeline.store.entries[0].content == "{invalid"
        assert lock.is_editing is False

    @pytest.mark.asyncio
    async def test_round_trip_revalidates(self, pipeline):
        text = '{"config": {"features": [1, 2], "ssl": false, "name": "clipman"}}'
        pipeline.store.ingest_historical_batch([make_entry(1, text)])

        step = await pipeline.format(text)
        step = await pipeline.minify(step)
        step = await pipeline.format(step)
        result = await pipeline.validate(step)

        assert result.is_valid is True
        assert result.parsed_value == json.loads(text)
