"""
Custom exceptions for media generation.

Every failure that leaves the package is one of the kinds below. Each class
carries a ``kind`` tag, whether the caller may retry, and a short message
suitable for showing to an end user.
"""

from typing import List, Optional, Tuple

import openai
import requests


class MediaGenerationError(Exception):
    """Base exception for media generation errors."""

    kind = "error"
    retryable = False
    user_message = "Something went wrong while generating media."


class ConfigurationError(MediaGenerationError):
    """Exception for missing or invalid credentials and settings."""

    kind = "config"
    user_message = "The service is not configured. Check the API credentials."


class ValidationError(MediaGenerationError, ValueError):
    """Exception for invalid caller input."""

    kind = "invalid_argument"
    user_message = "The request was invalid."


class AuthenticationError(MediaGenerationError):
    """Exception for a rejected credential exchange."""

    kind = "auth"
    retryable = True
    user_message = "Could not authenticate with the provider. Try again shortly."


class GenerationError(MediaGenerationError):
    """Exception for a provider that rejected a request or returned nothing usable."""

    kind = "generation"
    retryable = True
    user_message = "Generation failed. Try again."

    def __init__(
        self,
        message: str = "Generation failed",
        provider: Optional[str] = None,
        failures: Optional[List[Tuple[str, str]]] = None
    ):
        self.provider = provider
        self.failures = list(failures or [])
        super().__init__(message)


class SubmissionError(GenerationError):
    """Exception for a job that the queue provider would not accept."""

    user_message = "The video job could not be started. Try again."


class PollError(GenerationError):
    """Exception for one failed status check; the remote job may still be running."""


class RateLimitError(GenerationError):
    """Exception for rate limiting errors."""

    user_message = "The provider is busy. Wait a moment and try again."


class RefinementError(GenerationError):
    """Exception for a text provider response missing the refined prompt."""

    user_message = "The prompt could not be refined. Try again."


class ProtocolError(MediaGenerationError):
    """Exception for a provider response that breaks the provider's contract.

    Not retryable without investigation.
    """

    kind = "protocol"
    user_message = "The provider returned an unexpected response."


class OperationTimeoutError(MediaGenerationError, TimeoutError):
    """Exception for an exceeded deadline."""

    kind = "timeout"
    retryable = True
    user_message = "The operation took too long. Try again with more time."


class OperationCancelledError(MediaGenerationError):
    """Exception for a caller-initiated abort."""

    kind = "cancelled"
    user_message = "Cancelled."


def normalize_error(error: BaseException) -> MediaGenerationError:
    """
    Map any exception raised below the orchestrator into the taxonomy.

    Args:
        error: Exception raised by a component or a third-party library

    Returns:
        A MediaGenerationError; the original exception is chained as the cause
        when a new one is created
    """
    if isinstance(error, MediaGenerationError):
        return error

    if isinstance(error, (requests.exceptions.Timeout, openai.APITimeoutError)):
        normalized: MediaGenerationError = OperationTimeoutError(f"Provider request timed out: {error}")
    elif isinstance(error, openai.AuthenticationError):
        normalized = AuthenticationError(f"Provider rejected credentials: {error}")
    elif isinstance(error, openai.RateLimitError):
        normalized = RateLimitError(f"Provider rate limit: {error}")
    elif isinstance(error, (requests.exceptions.RequestException, openai.APIError)):
        normalized = GenerationError(f"Provider request failed: {error}")
    elif isinstance(error, TimeoutError):
        normalized = OperationTimeoutError(str(error) or "Operation timed out")
    elif isinstance(error, ValueError):
        normalized = ValidationError(str(error))
    else:
        normalized = GenerationError(f"Unexpected error: {error}")

    normalized.__cause__ = error
    return normalized


def describe_error(error: BaseException) -> str:
    """Return the short user-facing message for an exception."""
    return normalize_error(error).user_message
