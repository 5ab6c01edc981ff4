from .models import (
    ColumnSpec,
    ConnectionParams,
    Dialect,
    ExtractionPlan,
    MetadataResolver,
    Partition,
    ReadRequest,
    ResolvedIncrementalColumn,
    SplitPlan,
    WatermarkComparison,
)
