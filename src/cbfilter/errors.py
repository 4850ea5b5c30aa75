"""Error types for cbfilter.

This module defines the error types raised while loading provider
descriptors, building requests, talking to an AI endpoint and moving data
through the clipboard.
"""

from typing import Optional


class ClipFilterError(Exception):
    """Base class for all cbfilter errors.

    This is the parent class for all package-specific exceptions.
    """

    pass


class ConfigurationError(ClipFilterError):
    """Base class for configuration-related errors.

    This is raised for errors related to configuration loading, parsing,
    or validation.
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        """Initialize configuration error.

        Args:
            message: Error message
            path: Optional path to the configuration file that caused the error
        """
        super().__init__(message)
        self.message = message
        self.path = path


class InvalidConfigFormatError(ConfigurationError):
    """Raised when a configuration or descriptor file has an invalid format.

    Examples:
        >>> try:
        ...     parse_provider_file(Path("apidef/Broken.json"))
        ... except InvalidConfigFormatError as e:
        ...     print(f"Invalid descriptor: {e.path}")
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        expected_type: str = "dict",
    ) -> None:
        """Initialize invalid format error.

        Args:
            message: Error message
            path: Optional path to the configuration file
            expected_type: Expected type of the configuration
        """
        super().__init__(message, path)
        self.expected_type = expected_type


class TemplateNotFoundError(ClipFilterError):
    """Raised when no template matches a filter's input/output pair."""

    def __init__(
        self,
        message: str,
        input_type: Optional[str] = None,
        output_type: Optional[str] = None,
        provider_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.input_type = input_type
        self.output_type = output_type
        self.provider_id = provider_id


class EndpointResolutionError(ClipFilterError):
    """Raised when a server URL and template endpoint yield no host."""

    def __init__(self, message: str, server_url: str = "", template_path: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.server_url = server_url
        self.template_path = template_path


class TransportError(ClipFilterError):
    """Raised when an HTTP request fails.

    Examples:
        >>> try:
        ...     transport.send("api.openai.com", "/v1/chat/completions", True, headers, body)
        ... except TransportError as e:
        ...     print(f"Request to {e.url} failed with status {e.status_code}")
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        """Initialize transport error.

        Args:
            message: Error message
            url: Optional URL that was being accessed
            status_code: HTTP status code when the server answered
        """
        super().__init__(message)
        self.message = message
        self.url = url
        self.status_code = status_code


class ExtractionError(ClipFilterError):
    """Raised when a response holds no usable result for the declared output."""

    def __init__(self, message: str, output_type: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.output_type = output_type


class ClipboardError(ClipFilterError):
    """Raised when clipboard content is missing or cannot be read or written."""

    def __init__(self, message: str, kind: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind


class CredentialError(ClipFilterError):
    """Raised by secret protectors when encryption or decryption fails."""

    pass


class ModelDiscoveryError(ClipFilterError):
    """Raised when a provider's model listing cannot be fetched or parsed."""

    def __init__(self, message: str, provider_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.provider_id = provider_id

    def __str__(self) -> str:
        """Return string representation of the error.

        Returns:
            Error message
        """
        return self.message
