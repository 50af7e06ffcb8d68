# jira-mcp-installer - Jira MCP server setup for AI coding tools
# ABOUTME: Version information
__version__ = "0.1.0"

# ABOUTME: Export core data models
from jiramcp.models import (
    ClientDescriptor,
    Credentials,
    DetectionResult,
    InstallRequest,
    InstallResult,
    RegistryCatalog,
    ScopeValidationResult,
)

# ABOUTME: Export catalog, detection and install entry points
from jiramcp.fetcher import CatalogFetcher, CatalogSchemaError, CatalogUnavailableError
from jiramcp.registry import ClientRegistry, builtin_registry, create_registry
from jiramcp.detection import ToolDetector
from jiramcp.validation import validate_batch_scopes, validate_tool_scope
from jiramcp.installer import install_many, install_one

__all__ = [
    "__version__",
    "ClientDescriptor",
    "Credentials",
    "DetectionResult",
    "InstallRequest",
    "InstallResult",
    "RegistryCatalog",
    "ScopeValidationResult",
    "CatalogFetcher",
    "CatalogSchemaError",
    "CatalogUnavailableError",
    "ClientRegistry",
    "builtin_registry",
    "create_registry",
    "ToolDetector",
    "validate_tool_scope",
    "validate_batch_scopes",
    "install_one",
    "install_many",
]
