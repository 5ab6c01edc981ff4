import logging
import re
import time
from typing import List, Optional, Tuple

from sqlalchemy import text

from rdbscan.domain.models import ExtractionPlan, Partition
from rdbscan.domain.models.base import BaseModel
from rdbscan.domain.models.split_plan import SPLIT_MODULUS, SPLIT_REMAINDER
from rdbscan.exceptions import ScanTimeout
from rdbscan.infra.engine import SqlAlchemyEngineProvider
from rdbscan.utils import TaskExecutor

logger = logging.getLogger(__name__)

# `:name` tokens that are not split parameters, e.g. inside a quoted literal of
# the base filter
_STRAY_BIND = re.compile(
    rf"(?<![:\w\\]):(?!{SPLIT_MODULUS}\b|{SPLIT_REMAINDER}\b)(?=\w)"
)


def to_statement(query: str):
    """Wrap a plan query in `text()`, binding only the split parameters."""
    return text(_STRAY_BIND.sub(r"\\:", query))


class PartitionResult(BaseModel):
    index: int
    columns: Tuple[str, ...]
    rows: List[tuple]
    took: float

    @property
    def row_count(self) -> int:
        return len(self.rows)


class SqlAlchemyScanExecutor:
    """Runs every partition of a plan as an independent task.

    Each task uses its own connection and streams rows in batches of
    `plan.fetch_size`. The query timeout is checked per partition between
    batches; a partition running over it raises `ScanTimeout`.
    """

    def __init__(self, engine_provider: Optional[SqlAlchemyEngineProvider] = None):
        self.engine_provider = engine_provider or SqlAlchemyEngineProvider()

    def _scan_partition(self, plan: ExtractionPlan, partition: Partition):
        engine = self.engine_provider.get(plan.connection)
        start_time = time.time()
        deadline = start_time + plan.query_timeout if plan.query_timeout else None

        rows = []
        with engine.connect() as conn:
            result = conn.execution_options(stream_results=True).execute(
                to_statement(plan.query), partition.params
            )
            for batch in result.partitions(plan.fetch_size):
                rows.extend(tuple(row) for row in batch)
                if deadline is not None and time.time() > deadline:
                    raise ScanTimeout(
                        f"Partition {partition.index} exceeded the query timeout of {plan.query_timeout}s"
                    )

        took = time.time() - start_time
        logger.info(
            f"Partition {partition.index}: fetched {len(rows)} rows in {took:.1f} seconds"
        )
        return PartitionResult(
            index=partition.index, columns=plan.column_names, rows=rows, took=took
        )

    def execute(
        self, plan: ExtractionPlan, dry_run: bool = False
    ) -> List[PartitionResult]:
        logger.info(f"Running {plan}")
        with TaskExecutor(
            processes=plan.split_plan.num_partitions, dry_run=dry_run
        ) as task_executor:
            return task_executor.run(
                lambda partition: self._scan_partition(plan, partition),
                plan.partitions,
            )
