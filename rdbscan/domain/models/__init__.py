from .connection import ConnectionParams
from .dialect import Dialect, TypeCategory, classify_type
from .extraction_plan import ExtractionPlan
from .incremental import ResolvedIncrementalColumn
from .metadata_resolver import MetadataResolver
from .read_request import ColumnSpec, ReadRequest, WatermarkComparison
from .split_plan import Partition, SplitPlan

__all__ = [
    "ColumnSpec",
    "ConnectionParams",
    "Dialect",
    "ExtractionPlan",
    "MetadataResolver",
    "Partition",
    "ReadRequest",
    "ResolvedIncrementalColumn",
    "SplitPlan",
    "TypeCategory",
    "WatermarkComparison",
    "classify_type",
]
