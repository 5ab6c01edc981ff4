from typing import Dict, Optional, Tuple

from rdbscan.domain.models.base import BaseModel

SPLIT_MODULUS = "split_modulus"
SPLIT_REMAINDER = "split_remainder"


class Partition(BaseModel):
    index: int
    # Bound values as (name, value) pairs, empty for a single scan
    bindings: Tuple[Tuple[str, int], ...] = ()
    # Statement with this partition's split predicate materialized
    sql: Optional[str] = None

    @property
    def params(self) -> Dict[str, int]:
        """A fresh dict of the bound values, ready to pass to `execute`."""
        return dict(self.bindings)

    def with_sql(self, sql: str) -> "Partition":
        return self.model_copy(update={"sql": sql})


class SplitPlan(BaseModel):
    partitioned: bool
    split_key: Optional[str] = None
    partitions: Tuple[Partition, ...]

    @classmethod
    def single(cls) -> "SplitPlan":
        return cls(partitioned=False, partitions=(Partition(index=0),))

    @property
    def num_partitions(self) -> int:
        return len(self.partitions)

    def __repr__(self):
        return f'<SplitPlan partitioned={self.partitioned} split_key="{self.split_key}" partitions={self.num_partitions}>'

    def __str__(self):
        return repr(self)
