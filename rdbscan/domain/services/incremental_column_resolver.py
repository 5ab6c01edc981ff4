import logging
from typing import Optional, Sequence

from rdbscan.domain.models import (
    ColumnSpec,
    ConnectionParams,
    MetadataResolver,
    ResolvedIncrementalColumn,
)
from rdbscan.exceptions import IncrementalColumnNotFound

logger = logging.getLogger(__name__)


class IncrementalColumnResolver:
    """Makes sure the incremental column is selected and knows its native type.

    The projection passed in is never modified. The returned
    `ResolvedIncrementalColumn.projection` is the one to build the query with.
    """

    def __init__(self, metadata_resolver: MetadataResolver):
        self.metadata_resolver = metadata_resolver

    def resolve(
        self,
        projection: Sequence[ColumnSpec],
        incremental_column: Optional[str],
        table: str,
        connection: Optional[ConnectionParams] = None,
    ) -> Optional[ResolvedIncrementalColumn]:
        if not incremental_column:
            return None

        projection = tuple(projection)
        position = next(
            (
                i
                for i, column in enumerate(projection)
                if column.name == incremental_column
            ),
            None,
        )

        if position is not None and projection[position].type:
            return ResolvedIncrementalColumn(
                name=incremental_column,
                native_type=projection[position].type,
                injected=False,
                projection=projection,
            )

        logger.debug(f"Looking up type of '{incremental_column}' in '{table}'")
        native_type = self.metadata_resolver.lookup_column_type(
            connection, table, incremental_column
        )
        if not native_type:
            raise IncrementalColumnNotFound(incremental_column, table)

        column = ColumnSpec(name=incremental_column, type=native_type)
        if position is None:
            logger.info(
                f"Incremental column '{incremental_column}' is not selected, adding it to the projection"
            )
            projection = projection + (column,)
        else:
            projection = (
                projection[:position] + (column,) + projection[position + 1 :]
            )

        return ResolvedIncrementalColumn(
            name=incremental_column,
            native_type=native_type,
            injected=position is None,
            projection=projection,
        )
