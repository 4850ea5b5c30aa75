"""Clipboard filters backed by declarative AI provider templates.

This package loads provider descriptors, turns a user-defined filter into an
HTTP request against the matching template, extracts the text or image from
the response and writes it back to the clipboard.
"""

# Version of the package
from importlib.metadata import version as _version

__version__ = _version("cbfilter")

# Import main components for easier access
from .clipboard import Clipboard, MemoryClipboard, SystemClipboard
from .config_store import AppConfig, ConfigStore, Hotkey
from .credentials import CredentialStore
from .definitions import (
    ApiCallResult,
    ApiProvider,
    ClipboardType,
    FilterDefinition,
    IOType,
    ModelConfig,
    TemplateDefinition,
)
from .discovery import fetch_models, perform_initial_setup, pick_model_by_patterns
from .errors import (
    ClipboardError,
    ClipFilterError,
    ConfigurationError,
    CredentialError,
    EndpointResolutionError,
    ExtractionError,
    ModelDiscoveryError,
    TemplateNotFoundError,
    TransportError,
)
from .orchestrator import (
    EventQueue,
    FilterInvoker,
    FilterRunner,
    InvocationOutcome,
    InvocationState,
    build_system_prompt,
)
from .placeholders import PlaceholderContext, substitute
from .state import AppState
from .templates import TemplateRegistry
from .transport import RequestsTransport, Transport

# Define public API
__all__ = [
    # Templates
    "TemplateRegistry",
    "ApiProvider",
    "TemplateDefinition",
    "PlaceholderContext",
    "substitute",
    # Filters and models
    "AppState",
    "AppConfig",
    "ConfigStore",
    "Hotkey",
    "FilterDefinition",
    "ModelConfig",
    "IOType",
    "ClipboardType",
    "ApiCallResult",
    "CredentialStore",
    # Execution
    "FilterRunner",
    "FilterInvoker",
    "InvocationOutcome",
    "InvocationState",
    "EventQueue",
    "build_system_prompt",
    "Clipboard",
    "MemoryClipboard",
    "SystemClipboard",
    "Transport",
    "RequestsTransport",
    # Discovery
    "fetch_models",
    "pick_model_by_patterns",
    "perform_initial_setup",
    # Errors
    "ClipFilterError",
    "ConfigurationError",
    "TemplateNotFoundError",
    "EndpointResolutionError",
    "TransportError",
    "ExtractionError",
    "ClipboardError",
    "CredentialError",
    "ModelDiscoveryError",
]
