# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Custom exceptions for the move oracle.

This module defines the exception hierarchy for oracle operations:
- OracleError: Base exception for all oracle-related errors
- OracleUnavailableError: Transport or HTTP failure from the provider
- OracleEmptyResponseError: Provider answered with no usable text
- ExhaustedEndpointsError: Every configured model endpoint was not found
- ConfigurationError: No credential configured
"""


class OracleError(Exception):
    """Base exception for all oracle-related errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: dict | None = None):
        """Initialize oracle error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class OracleUnavailableError(OracleError):
    """Error from the oracle provider.

    Raised when the provider returns an error status or is unreachable.

    Attributes:
        status_code: HTTP status code from the provider, if any.
        response_body: Raw response body if available.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
        details: dict | None = None,
    ):
        """Initialize oracle unavailable error.

        Args:
            message: Human-readable error description.
            status_code: HTTP status code from the provider.
            response_body: Raw response body if available.
            details: Optional dictionary with additional error context.
        """
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message, details)

    def __str__(self) -> str:
        """Return string representation with status code."""
        base = f"{self.message}"
        if self.status_code:
            base = f"[{self.status_code}] {base}"
        if self.details:
            base = f"{base} - Details: {self.details}"
        return base


class OracleEmptyResponseError(OracleUnavailableError):
    """Provider answered successfully but with no usable text.

    Attributes:
        block_reason: Safety block reason reported by the provider, if any.
    """

    def __init__(
        self,
        message: str,
        block_reason: str | None = None,
        status_code: int | None = None,
        response_body: str | None = None,
        details: dict | None = None,
    ):
        """Initialize empty response error.

        Args:
            message: Human-readable error description.
            block_reason: Safety block reason reported by the provider.
            status_code: HTTP status code from the provider.
            response_body: Raw response body if available.
            details: Optional dictionary with additional error context.
        """
        self.block_reason = block_reason
        super().__init__(message, status_code, response_body, details)


class ExhaustedEndpointsError(OracleError):
    """Every endpoint candidate returned not-found.

    Attributes:
        attempts: Endpoint names tried, in order.
        diagnostic: Result of the model listing call (available model
            names, or the listing's own error).
    """

    def __init__(
        self,
        message: str,
        attempts: list[str] | None = None,
        diagnostic: str | None = None,
        details: dict | None = None,
    ):
        """Initialize exhausted endpoints error.

        Args:
            message: Human-readable error description.
            attempts: Endpoint names tried, in order.
            diagnostic: Result of the model listing call.
            details: Optional dictionary with additional error context.
        """
        self.attempts = attempts or []
        self.diagnostic = diagnostic
        super().__init__(message, details)

    def __str__(self) -> str:
        """Return string representation with the diagnostic."""
        base = self.message
        if self.attempts:
            base = f"{base} - Tried: {', '.join(self.attempts)}"
        if self.diagnostic:
            base = f"{base} - {self.diagnostic}"
        return base


class ConfigurationError(OracleError):
    """Raised when the oracle is used without a credential."""

    pass
