"""Exception hierarchy for the tag cloud generator.

All exceptions derive from TagCloudError, so the CLI can report any failure
of the pipeline with a single handler while tests match on the precise type.
Input/output failures are left as the built-in ``OSError`` family.
"""


class TagCloudError(Exception):
    """Base exception for all tag cloud errors."""


class ValidationError(TagCloudError, ValueError):
    """User-supplied input failed validation.

    Raised when the requested number of words is below one, when the text
    contains no words, or when the size range or output mode is invalid.
    """


class PreconditionError(TagCloudError):
    """A required input was absent.

    Signals a broken calling contract (e.g. ``None`` passed where text or a
    frequency mapping is required), not a recoverable runtime condition.
    """


class InvalidStateError(TagCloudError):
    """A DocumentRenderer operation was invoked outside its valid state.

    Raised for writes before ``open()`` or after ``close()``, and for
    opening or closing a document twice.
    """
