from datetime import datetime

import pytest

from rdbscan.domain.models import (
    ColumnSpec,
    ResolvedIncrementalColumn,
    WatermarkComparison,
)
from rdbscan.domain.services import QueryBuilder
from rdbscan.infra.dialects import get_dialect

PROJECTION = (ColumnSpec(name="id"), ColumnSpec(name="amount"))


@pytest.fixture
def builder():
    return QueryBuilder(get_dialect("mysql"))


def _incremental_column(native_type="BIGINT"):
    return ResolvedIncrementalColumn(
        name="updated_at",
        native_type=native_type,
        injected=True,
        projection=PROJECTION + (ColumnSpec(name="updated_at", type=native_type),),
    )


def test_plain_select(builder):
    assert builder.build(PROJECTION, "orders") == "SELECT id, amount FROM orders"


def test_projection_order_is_kept(builder):
    projection = (
        ColumnSpec(name="status"),
        ColumnSpec(name="id"),
        ColumnSpec(name="order"),
    )
    assert (
        builder.build(projection, "shop.orders")
        == "SELECT status, id, `order` FROM shop.orders"
    )


@pytest.mark.parametrize(
    "where,incremental,split,expected_where",
    [
        ("status='OK'", "", "", " WHERE status='OK'"),
        ("", "updated_at > 100", "", " WHERE updated_at > 100"),
        ("", "", "MOD(id,2)=0", " WHERE MOD(id,2)=0"),
        (
            "status='OK'",
            "updated_at > 100",
            "MOD(id,2)=1",
            " WHERE status='OK' AND updated_at > 100 AND MOD(id,2)=1",
        ),
        ("  ", "", "", ""),
    ],
)
def test_where_clauses(builder, where, incremental, split, expected_where):
    assert (
        builder.build(PROJECTION, "orders", where, incremental, split)
        == "SELECT id, amount FROM orders" + expected_where
    )


def test_filter_with_or_is_wrapped(builder):
    sql = builder.build(
        PROJECTION, "orders", "status='OK' OR status='NEW'", "updated_at > 100"
    )
    assert sql.endswith("WHERE (status='OK' OR status='NEW') AND updated_at > 100")


@pytest.mark.parametrize(
    "where",
    ["status IN ('OK', 'NEW') AND (a = 1 OR b = 2)", "note = 'this or that'", "color = 'red'"],
)
def test_filter_without_top_level_or_is_kept(builder, where):
    sql = builder.build(PROJECTION, "orders", where, "updated_at > 100")
    assert sql.endswith(f"WHERE {where} AND updated_at > 100")


def test_incremental_predicate(builder):
    assert builder.incremental_predicate(_incremental_column(), 100) == "updated_at > 100"
    assert (
        builder.incremental_predicate(
            _incremental_column(), 100, WatermarkComparison.INCLUSIVE
        )
        == "updated_at >= 100"
    )
    assert builder.incremental_predicate(_incremental_column(), 100, "inclusive") == (
        "updated_at >= 100"
    )


def test_incremental_predicate_on_timestamp(builder):
    assert (
        builder.incremental_predicate(
            _incremental_column("DATETIME"), datetime(2024, 1, 3, 10)
        )
        == "updated_at > '2024-01-03 10:00:00'"
    )


def test_no_watermark_means_no_lower_bound(builder):
    assert builder.incremental_predicate(_incremental_column(), None) == ""
    assert builder.incremental_predicate(None, 100) == ""


def test_build_is_deterministic(builder):
    args = (PROJECTION, "orders", "status='OK'", "updated_at > 100", "MOD(id,2)=0")
    assert builder.build(*args) == builder.build(*args)
