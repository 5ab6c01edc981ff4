import logging
from typing import Optional

from rdbscan.domain.models import Dialect, Partition, SplitPlan
from rdbscan.domain.models.split_plan import SPLIT_MODULUS, SPLIT_REMAINDER

logger = logging.getLogger(__name__)


class SplitPlanner:
    """Decides between a single scan and a scan split by `MOD(split_key, N)`.

    Partition `i` selects the rows whose split key modulo N is `i` or `-i`,
    partition 0 also takes the rows with a NULL key, so every row of the
    table falls into exactly one partition.
    """

    def __init__(self, dialect: Dialect):
        self.dialect = dialect

    def plan(self, parallelism: int, split_key: Optional[str]) -> SplitPlan:
        split_key = (split_key or "").strip()
        if parallelism <= 1 or not split_key:
            return SplitPlan.single()

        logger.info(f"Splitting scan on '{split_key}' into {parallelism} partitions")
        return SplitPlan(
            partitioned=True,
            split_key=split_key,
            partitions=tuple(
                Partition(
                    index=i,
                    bindings=((SPLIT_MODULUS, parallelism), (SPLIT_REMAINDER, i)),
                )
                for i in range(parallelism)
            ),
        )

    def predicate_template(self, split_plan: SplitPlan) -> str:
        """Split predicate with named bind parameters, empty for a single scan."""
        if not split_plan.partitioned:
            return ""
        return self.dialect.mod_predicate(
            split_plan.split_key, f":{SPLIT_MODULUS}", f":{SPLIT_REMAINDER}"
        )

    def predicate(self, split_plan: SplitPlan, partition: Partition) -> str:
        if not split_plan.partitioned:
            return ""
        return self.dialect.mod_predicate(
            split_plan.split_key,
            partition.params[SPLIT_MODULUS],
            partition.params[SPLIT_REMAINDER],
        )
