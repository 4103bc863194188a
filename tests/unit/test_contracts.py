"""Unit tests for the contract models and error hierarchy."""

from __future__ import annotations

import pydantic
import pytest

from contracts.data_source import DataSourceCapability, DataSourceConnection
from contracts.errors import (
    PathOutsideProjectError,
    ResourceNotFoundError,
    ToolExecutionError,
    ToolNotFoundError,
    TooManyItemsError,
)
from contracts.message import (
    ImagePart,
    TextPart,
    ToolInvocation,
    ToolResultPart,
    parse_content_part,
    parse_content_parts,
)
from contracts.metadata import ToolUsageStats
from contracts.tool_sdk import Destination, ToolDefinition, ToolFeatures


class TestContentParts:
    def test_discriminated_parse(self) -> None:
        part = parse_content_part({"type": "text", "text": "hi"})
        assert isinstance(part, TextPart)

    def test_image_part(self) -> None:
        part = parse_content_part(
            {"type": "image", "source": {"type": "base64", "media_type": "image/png", "data": "AA=="}}
        )
        assert isinstance(part, ImagePart)
        assert part.source.media_type == "image/png"

    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            parse_content_part({"type": "text", "text": "hi", "source": {}})

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            parse_content_part({"type": "video", "url": "x"})

    def test_tool_result_nests_parts(self) -> None:
        parts = parse_content_parts(
            [{"type": "tool_result", "tool_use_id": "t1", "content": [{"type": "text", "text": "ok"}]}]
        )
        assert isinstance(parts[0], ToolResultPart)
        assert isinstance(parts[0].content[0], TextPart)


class TestToolInvocation:
    def test_frozen(self) -> None:
        inv = ToolInvocation(tool_use_id="t1", tool_name="x", tool_input={"a": 1})
        with pytest.raises(pydantic.ValidationError):
            inv.tool_name = "y"  # type: ignore[misc]


class TestToolUsageStats:
    def test_record(self) -> None:
        stats = ToolUsageStats()
        stats.record("search_project", True)
        stats.record("search_project", False)
        assert stats.tool_counts["search_project"] == 2
        assert stats.tool_results["search_project"].success == 1
        assert stats.tool_results["search_project"].failure == 1
        assert stats.last_tool_use == "search_project"
        assert stats.last_tool_success is False


class TestDataSourceConnection:
    def test_readonly_blocks_writes(self) -> None:
        conn = DataSourceConnection(
            id="ds",
            name="local",
            capabilities=[DataSourceCapability.READ, DataSourceCapability.WRITE],
            readonly=True,
        )
        assert conn.can("read")
        assert not conn.can(DataSourceCapability.WRITE)

    def test_disabled_can_nothing(self) -> None:
        conn = DataSourceConnection(
            id="ds", name="local", capabilities=[DataSourceCapability.READ], enabled=False
        )
        assert not conn.can("read")

    def test_resource_uri(self) -> None:
        conn = DataSourceConnection(id="ds", name="local", uri_template="bb+filesystem://{path}")
        assert conn.resource_uri("src/a.py") == "bb+filesystem://src/a.py"


class TestToolSdkTypes:
    def test_features_async_alias(self) -> None:
        features = ToolFeatures.model_validate({"async": True})
        assert features.async_ is True
        assert features.model_dump(by_alias=True)["async"] is True

    def test_destination_browser_alias(self) -> None:
        assert Destination("browser") is Destination.RICH
        with pytest.raises(ValueError):
            Destination("pdf")

    def test_definition_openai_export(self) -> None:
        defn = ToolDefinition(name="t", description="d", input_schema={"type": "object"})
        assert defn.to_openai()["function"]["parameters"] == {"type": "object"}


class TestErrors:
    def test_messages(self) -> None:
        assert str(TooManyItemsError("URLs", 6, 7)) == "Too many URLs provided. Maximum allowed is 6"
        assert str(PathOutsideProjectError("../x")) == "Path ../x is outside project root"
        assert str(ResourceNotFoundError("a.html")) == "File a.html does not exist"

    def test_hierarchy(self) -> None:
        assert issubclass(PathOutsideProjectError, ToolExecutionError)
        assert issubclass(ToolNotFoundError, KeyError)
        assert str(ToolNotFoundError("nope")) == "Tool not found: nope"
