from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module defines custom exceptions for the run orchestration engine, the remote service layer and session storage.
"""


class RunRelayError(Exception):
    """Base exception for all runrelay errors."""

    pass


class MissingIdentifierError(RunRelayError, ValueError):
    """
    A required session or run identifier was absent.
    This is a precondition failure of the call and is never retried.
    """

    pass


class InvalidRunTransitionError(RunRelayError):
    """Raised when a run is asked to move to a state it cannot reach from its current one."""

    pass


class RemoteServiceError(RunRelayError):
    """
    The remote execution service failed to answer a request.
    Wraps provider SDK errors so the engine only has to know one type.
    """

    pass


class RemoteConfigurationError(RemoteServiceError):
    pass


class MalformedMessageError(RemoteServiceError):
    """The latest message of a completed run did not have the expected text structure."""

    pass


class SessionStoreError(RunRelayError):
    pass
