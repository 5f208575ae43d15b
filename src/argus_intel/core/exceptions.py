"""
Exception hierarchy for Argus Intel.

Library code raises these; the analysis session, the CLI and the dashboard API
catch them and turn them into user-facing messages.
"""


class ArgusError(Exception):
    """Base class for all Argus Intel errors."""


class GenerationError(ArgusError):
    """The content generation service failed or returned non-conforming output."""


class MetadataDecodeError(ArgusError):
    """An uploaded file could not be parsed as image metadata."""


class InvalidSubjectError(ArgusError, ValueError):
    """A search subject was rejected before any producer was called."""
