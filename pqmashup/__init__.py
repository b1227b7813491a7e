"""Extract, edit and reinject Power Query DataMashup content in Excel workbooks."""

from .codec import decode, encode
from .composer import pack, unpack
from .errors import (
    AutomationError,
    BlobNotFoundError,
    ConfigError,
    InputNotFoundError,
    MalformedArchiveError,
    MashupError,
)
from .locator import locate
from .reinject import reinject
from .splitter import split

__version__ = "0.1.0"
