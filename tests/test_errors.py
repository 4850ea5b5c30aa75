"""Tests for error classes."""

from cbfilter.errors import (
    ClipboardError,
    ClipFilterError,
    ConfigurationError,
    CredentialError,
    EndpointResolutionError,
    ExtractionError,
    InvalidConfigFormatError,
    ModelDiscoveryError,
    TemplateNotFoundError,
    TransportError,
)


class TestErrorClasses:
    """Tests for all error classes."""

    def test_configuration_errors(self) -> None:
        """Test ConfigurationError and its subclasses."""
        error = ConfigurationError("Bad config", path="/tmp/config.json")
        assert error.message == "Bad config"
        assert error.path == "/tmp/config.json"
        assert str(error) == "Bad config"
        assert isinstance(error, ClipFilterError)

        assert ConfigurationError("No path").path is None

    def test_invalid_config_format_error(self) -> None:
        """Test InvalidConfigFormatError."""
        error = InvalidConfigFormatError("Expected object", path="apidef/Broken.json")
        assert error.expected_type == "dict"
        assert error.path == "apidef/Broken.json"

        error = InvalidConfigFormatError("Expected list", expected_type="list")
        assert error.expected_type == "list"
        assert isinstance(error, ConfigurationError)

    def test_template_not_found_error(self) -> None:
        """Test TemplateNotFoundError."""
        error = TemplateNotFoundError("No template", input_type="image", output_type="text", provider_id="Acme")
        assert error.message == "No template"
        assert (error.input_type, error.output_type, error.provider_id) == ("image", "text", "Acme")

        bare = TemplateNotFoundError("No template")
        assert bare.provider_id is None

    def test_endpoint_resolution_error(self) -> None:
        """Test EndpointResolutionError."""
        error = EndpointResolutionError("No host", server_url="", template_path="/chat")
        assert error.server_url == ""
        assert error.template_path == "/chat"
        assert str(error) == "No host"

    def test_transport_error(self) -> None:
        """Test TransportError."""
        error = TransportError("HTTP status 500", url="https://h/x", status_code=500)
        assert error.url == "https://h/x"
        assert error.status_code == 500

        refused = TransportError("Connection refused")
        assert refused.status_code is None
        assert refused.url is None

    def test_runtime_errors(self) -> None:
        """Test extraction, clipboard, credential and discovery errors."""
        assert ExtractionError("Empty", output_type="text").output_type == "text"
        assert ClipboardError("No image", kind="image").kind == "image"
        assert isinstance(CredentialError("failed"), ClipFilterError)

        discovery = ModelDiscoveryError("No models", provider_id="Acme")
        assert discovery.provider_id == "Acme"
        assert str(discovery) == "No models"

    def test_all_share_base_class(self) -> None:
        """Every package error can be caught as ClipFilterError."""
        for cls in (
            ConfigurationError,
            TemplateNotFoundError,
            EndpointResolutionError,
            TransportError,
            ExtractionError,
            ClipboardError,
            CredentialError,
            ModelDiscoveryError,
        ):
            assert issubclass(cls, ClipFilterError)
