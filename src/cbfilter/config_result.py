"""Configuration loading result object.

This module defines a standard result object for descriptor and config
loading operations.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ConfigResult:
    """Result of a configuration loading operation.

    Loading never raises for a single bad file; the outcome is reported
    through this object and the caller decides whether to skip the file.

    Attributes:
        success: Whether the operation was successful
        data: Parsed JSON object (if successful)
        error: Error message (if unsuccessful)
        exception: Original exception (if an error occurred)
        path: Path to the file (if applicable)
    """

    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    exception: Optional[Exception] = None
    path: Optional[str] = None
