"""Error types raised by the pqmashup library."""


class MashupError(Exception):
    """Base class for every failure pqmashup reports."""


class InputNotFoundError(MashupError):
    """A source workbook or directory does not exist."""


class BlobNotFoundError(MashupError):
    """No DataMashup element, or no archive signature inside it."""


class MalformedArchiveError(MashupError):
    """The outer workbook or the inner archive cannot be read."""


class AutomationError(MashupError):
    """The spreadsheet host automation raised or is unavailable."""


class ConfigError(MashupError):
    """A settings file or batch manifest is invalid."""
