# ABOUTME: Tests for scope validation and fallback selection
import pytest

from jiramcp.fetcher import parse_catalog
from jiramcp.registry import ClientRegistry
from jiramcp.validation import get_fallback_scope, validate_batch_scopes, validate_tool_scope


def registry_with_scopes(catalog_payload, scopes: list[str]) -> ClientRegistry:
    catalog_payload["clients"]["cursor"]["scopes"] = scopes
    return ClientRegistry(parse_catalog(catalog_payload))


class TestValidateToolScope:
    """Tests for validate_tool_scope."""

    @pytest.mark.parametrize(
        "scopes, expected",
        [
            (["user"], True),
            (["global"], True),
            (["user", "global"], True),
            (["project"], False),
            (["local", "workspace"], False),
            ([], False),
        ],
    )
    def test_user_request_normalization(self, catalog_payload, make_tool, scopes, expected):
        registry = registry_with_scopes(catalog_payload, scopes)
        result = validate_tool_scope(make_tool(registry, "cursor"), "user", registry)
        assert result.is_compatible is expected

    @pytest.mark.parametrize(
        "scopes, expected",
        [
            (["project"], True),
            (["user", "project"], True),
            (["local"], False),
            (["workspace"], False),
            (["user"], False),
        ],
    )
    def test_project_request_needs_project(self, catalog_payload, make_tool, scopes, expected):
        registry = registry_with_scopes(catalog_payload, scopes)
        result = validate_tool_scope(make_tool(registry, "cursor"), "project", registry)
        assert result.is_compatible is expected

    def test_compatible_result(self, registry, make_tool):
        result = validate_tool_scope(make_tool(registry, "claude-code"), "project", registry)

        assert result.tool_id == "claude-code"
        assert result.tool_name == "Anthropic Claude Code"
        assert result.requested_scope == "project"
        assert result.supported_scopes == ("user", "project")
        assert result.fallback_scope is None
        assert result.warning_message is None

    def test_project_falls_back_to_user(self, registry, make_tool):
        result = validate_tool_scope(make_tool(registry, "claude-desktop"), "project", registry)

        assert not result.is_compatible
        assert result.fallback_scope == "user"
        assert result.warning_message == (
            "Anthropic Claude Desktop: project scope not supported, will use user"
        )

    def test_project_falls_back_via_global(self, registry, make_tool):
        result = validate_tool_scope(make_tool(registry, "opencode"), "project", registry)
        assert result.fallback_scope == "user"

    def test_no_fallback_for_user_request(self, registry, make_tool):
        result = validate_tool_scope(make_tool(registry, "vscode-copilot"), "user", registry)

        assert not result.is_compatible
        assert result.fallback_scope is None
        assert "GitHub Copilot" in result.warning_message
        assert "no fallback" in result.warning_message

    def test_project_without_user_or_global_has_no_fallback(self, catalog_payload, make_tool):
        registry = registry_with_scopes(catalog_payload, ["local"])
        result = validate_tool_scope(make_tool(registry, "cursor"), "project", registry)

        assert result.fallback_scope is None
        assert result.warning_message is not None


class TestGetFallbackScope:
    def test_user_request_never_falls_back(self, registry, make_tool):
        assert get_fallback_scope(make_tool(registry, "vscode-copilot"), "user", registry) is None

    def test_project_request(self, registry, make_tool):
        assert get_fallback_scope(make_tool(registry, "codex-cli"), "project", registry) == "user"
        assert get_fallback_scope(make_tool(registry, "vscode-copilot"), "project", registry) is None


class TestValidateBatchScopes:
    def test_preserves_order(self, registry, make_tool):
        tools = [make_tool(registry, name) for name in ("opencode", "claude-code", "vscode-copilot")]
        results = validate_batch_scopes(tools, "project", registry)

        assert [r.tool_id for r in results] == ["opencode", "claude-code", "vscode-copilot"]
        assert [r.is_compatible for r in results] == [False, True, True]

    def test_empty_input(self, registry):
        assert validate_batch_scopes([], "user", registry) == []

    def test_warning_iff_incompatible(self, registry, make_tool):
        tools = [make_tool(registry, name) for name in registry.names()]
        for scope in ("user", "project"):
            for result in validate_batch_scopes(tools, scope, registry):
                assert (result.warning_message is None) == result.is_compatible
