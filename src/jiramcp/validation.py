# Scope validation for jiramcp installs
from jiramcp.models import DetectionResult, RequestScope, ScopeValidationResult
from jiramcp.registry import ClientRegistry


def get_fallback_scope(
    tool: DetectionResult,
    requested_scope: RequestScope,
    registry: ClientRegistry,
) -> RequestScope | None:
    """Scope to use instead of an unsupported request.

    ABOUTME: Only project requests fall back (to user, via user or global)
    ABOUTME: Returns None when no fallback exists
    """
    if requested_scope == "project" and registry.is_compatible(tool.id, "user"):
        return "user"
    return None


def validate_tool_scope(
    tool: DetectionResult,
    requested_scope: RequestScope,
    registry: ClientRegistry,
) -> ScopeValidationResult:
    """Check whether a tool can be installed at the requested scope.

    ABOUTME: user is satisfied by a declared user or global scope
    ABOUTME: project is satisfied only by a declared project scope
    ABOUTME: warning_message is set exactly when the scope is incompatible

    Args:
        tool: Detected tool
        requested_scope: user or project
        registry: Registry holding the tool's declared scopes

    Returns:
        ScopeValidationResult with the fallback (if any)

    Examples:
        >>> validate_tool_scope(user_only_tool, "project", registry).fallback_scope
        'user'
    """
    is_compatible = registry.is_compatible(tool.id, requested_scope)
    fallback = None if is_compatible else get_fallback_scope(tool, requested_scope, registry)

    warning = None
    if not is_compatible:
        if fallback is not None:
            warning = (
                f"{tool.display_name}: {requested_scope} scope not supported, "
                f"will use {fallback}"
            )
        else:
            warning = (
                f"{tool.display_name}: {requested_scope} scope not supported, "
                "no fallback available"
            )

    return ScopeValidationResult(
        tool_id=tool.id,
        tool_name=tool.display_name,
        requested_scope=requested_scope,
        supported_scopes=registry.scopes_of(tool.id),
        is_compatible=is_compatible,
        fallback_scope=fallback,
        warning_message=warning,
    )


def validate_batch_scopes(
    tools: list[DetectionResult],
    requested_scope: RequestScope,
    registry: ClientRegistry,
) -> list[ScopeValidationResult]:
    """Validate each tool independently, keeping input order."""
    return [validate_tool_scope(tool, requested_scope, registry) for tool in tools]
