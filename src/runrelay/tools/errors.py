"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module defines custom exceptions for error handling in the tools.
"""

from __future__ import annotations

from ..errors import RunRelayError


class ToolError(RunRelayError):
    """Base exception for all tool-related errors."""

    pass


class ToolSourceError(ToolError):
    """
    A tool source could not be loaded.
    Registry construction stops on the first one, so the gateway never starts with a partial tool set.
    """

    pass


class ToolValidationError(ToolError):
    pass


class ToolAlreadyRegisteredError(ToolError):
    pass


class ToolRegistryFrozenError(ToolError):
    pass


class ToolExecutionError(ToolError):
    pass


class ToolNotFoundError(ToolError):
    pass
