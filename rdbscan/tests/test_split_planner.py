import math

import pytest

from rdbscan.domain.services import SplitPlanner
from rdbscan.infra.dialects import get_dialect


def _sql_mod(key, modulus):
    """`MOD` as databases compute it: the remainder has the sign of the key."""
    return int(math.fmod(key, modulus))


def _matching_partitions(split_plan, key):
    """Evaluate each partition's split predicate for one key."""
    matches = []
    for partition in split_plan.partitions:
        modulus = partition.params["split_modulus"]
        remainder = partition.params["split_remainder"]
        if key is None:
            if remainder == 0:
                matches.append(partition.index)
        elif abs(_sql_mod(key, modulus)) == remainder:
            matches.append(partition.index)
    return matches


@pytest.mark.parametrize(
    "parallelism,split_key",
    [(1, "id"), (0, "id"), (4, None), (4, ""), (4, "   ")],
)
def test_single_scan(parallelism, split_key):
    split_plan = SplitPlanner(get_dialect("mysql")).plan(parallelism, split_key)

    assert split_plan.partitioned is False
    assert split_plan.num_partitions == 1
    assert split_plan.partitions[0].params == {}


@pytest.mark.parametrize("parallelism", [2, 3, 7])
def test_partitions_cover_every_row_once(parallelism):
    split_plan = SplitPlanner(get_dialect("mysql")).plan(parallelism, " id ")

    assert split_plan.partitioned is True
    assert split_plan.split_key == "id"
    assert split_plan.num_partitions == parallelism
    assert [p.index for p in split_plan.partitions] == list(range(parallelism))

    for key in [None, *range(-1000, 1000)]:
        assert len(_matching_partitions(split_plan, key)) == 1


def test_predicates():
    planner = SplitPlanner(get_dialect("mysql"))
    split_plan = planner.plan(2, "id")

    assert planner.predicate_template(split_plan) == (
        "(ABS(MOD(id,:split_modulus))=:split_remainder "
        "OR (:split_remainder=0 AND id IS NULL))"
    )
    assert [planner.predicate(split_plan, p) for p in split_plan.partitions] == [
        "(MOD(id,2)=0 OR id IS NULL)",
        "ABS(MOD(id,2))=1",
    ]


def test_no_predicate_for_single_scan():
    planner = SplitPlanner(get_dialect("sqlserver"))
    split_plan = planner.plan(1, "id")

    assert planner.predicate_template(split_plan) == ""
    assert planner.predicate(split_plan, split_plan.partitions[0]) == ""
