import logging
from typing import Optional

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from rdbscan.domain.models import ConnectionParams, MetadataResolver
from rdbscan.exceptions import MetadataLookupFailure
from rdbscan.infra.engine import SqlAlchemyEngineProvider
from rdbscan.utils import sanitize_exception_message, split_table_name

logger = logging.getLogger(__name__)


class SqlAlchemyMetadataResolver(MetadataResolver):
    def __init__(self, engine_provider: Optional[SqlAlchemyEngineProvider] = None):
        self.engine_provider = engine_provider or SqlAlchemyEngineProvider()

    def lookup_column_type(
        self, connection: Optional[ConnectionParams], table: str, column_name: str
    ) -> Optional[str]:
        engine = self.engine_provider.get(connection)
        schema, table_name = split_table_name(table)

        try:
            columns = inspect(engine).get_columns(table_name, schema=schema)
        except SQLAlchemyError as e:
            message = sanitize_exception_message(str(e))
            logger.warning(f"Failed to inspect table '{table}': {message}")
            raise MetadataLookupFailure(
                f"Failed to inspect table '{table}': {message}"
            ) from e

        # Some backends report names in a different case than they were configured
        matches = [c for c in columns if c["name"] == column_name] or [
            c for c in columns if c["name"].lower() == column_name.lower()
        ]
        if not matches:
            return None

        return matches[0]["type"].compile(dialect=engine.dialect)
