"""
Custom exceptions for the project graph engine.

This module defines the hierarchy of exceptions raised by the graph store, the
analytics and query engines, the version history and the serialization adapters.
Each exception type corresponds to one category of failure so callers can turn
them into actionable messages (validation and format errors) or degrade them to
"nothing selected" (lookups of absent ids).
"""


class ValidationError(Exception):
    """
    Raised when data validation fails.

    Validation errors are raised synchronously, before any state is mutated, so
    a rejected call never leaves the store partially updated.

    Examples:
        * Empty or blank node/edge ids
        * Missing required descriptor fields
        * Payload that does not match the node kind
        * Negative neighbourhood depth
    """

    def __str__(self) -> str:
        """Format validation error message."""
        return f"Validation Error: {super().__str__()}"


class StorageError(Exception):
    """
    Raised when reading or writing a graph document file fails.

    Examples:
        * File system access errors
        * Undecodable file content
    """


class QueryError(Exception):
    """
    Raised when query operations fail.

    Examples:
        * Invalid filter operator
        * Malformed query parameters
    """


class InvalidRequestError(QueryError):
    """
    Raised when a tagged query request cannot be dispatched.

    Examples:
        * Unsupported query type
        * Missing required query parameters
    """


class GraphOperationError(Exception):
    """
    Raised when graph operations fail.

    Examples:
        * Re-entrant history recording
        * Graph integrity violations detected while applying a change
    """

    def __str__(self) -> str:
        """Format graph operation error message."""
        return f"Graph Operation Error: {super().__str__()}"


class EventError(Exception):
    """
    Raised when render event operations fail.

    Examples:
        * Publishing an event type nobody declared
        * Subscription errors
    """


class ConfigurationError(Exception):
    """
    Raised when configuration is invalid.

    Examples:
        * Non-positive history limit
        * Unknown backend or layout name
    """


class UnsupportedFormatError(Exception):
    """
    Raised when an import or export format is not implemented.

    This error is raised before any state mutation is attempted.

    Examples:
        * Exporting to a raster format
        * Importing from the textual graph-description format
    """


class ResourceNotFoundError(Exception):
    """
    Raised when a requested resource is not found.

    Examples:
        * Version record not found
    """


class VersionNotFoundError(ResourceNotFoundError):
    """
    Raised when a requested version record is not found.

    Examples:
        * Reverting to a version id that was never recorded
        * Reverting to a version evicted from the bounded history
    """
