from abc import ABC, abstractmethod
from typing import Optional

from .connection import ConnectionParams


class MetadataResolver(ABC):
    @abstractmethod
    def lookup_column_type(
        self, connection: Optional[ConnectionParams], table: str, column_name: str
    ) -> Optional[str]:
        """Return the native type of `table.column_name` or None when the column doesn't exist.

        Failures of the lookup itself (connectivity, permissions) are raised as
        `MetadataLookupFailure`.
        """
        pass
