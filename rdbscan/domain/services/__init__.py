from .incremental_column_resolver import IncrementalColumnResolver
from .query_builder import QueryBuilder
from .split_planner import SplitPlanner

__all__ = ["IncrementalColumnResolver", "QueryBuilder", "SplitPlanner"]
