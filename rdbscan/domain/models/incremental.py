from typing import Tuple

from rdbscan.domain.models.base import BaseModel
from rdbscan.domain.models.read_request import ColumnSpec


class ResolvedIncrementalColumn(BaseModel):
    name: str
    native_type: str
    # True when the column was appended because it was not selected
    injected: bool
    projection: Tuple[ColumnSpec, ...]
