"""Capability interfaces for the outer archive and XML backends."""

from abc import ABC, abstractmethod
from fnmatch import fnmatchcase
from typing import Any, List, Optional


class ArchiveBackend(ABC):
    """Read session over a workbook archive.

    Entry names are forward-slash separated and unique. Sessions are context
    managers and must be closed on every exit path.
    """

    @abstractmethod
    def names(self) -> List[str]:
        """Entry names in the archive's enumeration order."""

    @abstractmethod
    def read(self, name: str) -> bytes:
        pass

    @abstractmethod
    def close(self):
        pass

    def glob(self, pattern: str) -> List[str]:
        """Entry names matching ``pattern``, in enumeration order."""
        return [name for name in self.names() if fnmatchcase(name, pattern)]

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class XmlBackend(ABC):
    """Parse, search, edit and serialize one XML document."""

    @abstractmethod
    def parse(self, data: bytes) -> Any:
        pass

    @abstractmethod
    def find_local(self, document: Any, local_name: str) -> Optional[Any]:
        """First element whose local name matches, ignoring namespaces."""

    @abstractmethod
    def get_text(self, element: Any) -> str:
        pass

    @abstractmethod
    def set_text(self, element: Any, text: str):
        pass

    @abstractmethod
    def serialize(self, document: Any) -> bytes:
        pass
