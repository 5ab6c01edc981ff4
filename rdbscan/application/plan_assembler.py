import logging

from rdbscan.domain.models import ExtractionPlan, MetadataResolver, ReadRequest
from rdbscan.domain.services import (
    IncrementalColumnResolver,
    QueryBuilder,
    SplitPlanner,
)
from rdbscan.infra.dialects import get_dialect

logger = logging.getLogger(__name__)


class ExtractionPlanAssembler:
    def __init__(self, metadata_resolver: MetadataResolver):
        self.metadata_resolver = metadata_resolver
        self.incremental_column_resolver = IncrementalColumnResolver(
            metadata_resolver
        )

    def assemble(self, request: ReadRequest) -> ExtractionPlan:
        """Build the plan for a single read request.

        The incremental column is resolved first: it can add a column to the
        projection, and both the split and the query are built on top of that
        final projection. Any failure propagates and no plan is returned.
        """
        dialect = get_dialect(request.source_kind)

        incremental_column = self.incremental_column_resolver.resolve(
            request.columns,
            request.incremental_column,
            request.table,
            request.connection,
        )
        projection = (
            incremental_column.projection if incremental_column else request.columns
        )

        split_planner = SplitPlanner(dialect)
        split_plan = split_planner.plan(request.parallelism, request.split_key)

        query_builder = QueryBuilder(dialect)
        incremental_predicate = query_builder.incremental_predicate(
            incremental_column,
            request.start_location,
            request.watermark_comparison,
        )

        def build_query(split_predicate: str) -> str:
            return query_builder.build(
                projection,
                request.table,
                request.where,
                incremental_predicate,
                split_predicate,
            )

        query = build_query(split_planner.predicate_template(split_plan))
        split_plan = split_plan.model_copy(
            update={
                "partitions": tuple(
                    partition.with_sql(
                        build_query(split_planner.predicate(split_plan, partition))
                    )
                    for partition in split_plan.partitions
                )
            }
        )

        plan = ExtractionPlan(
            query=query,
            fetch_size=request.fetch_size or dialect.fetch_size,
            query_timeout=request.query_timeout or dialect.query_timeout,
            projection=projection,
            split_plan=split_plan,
            dialect=dialect,
            connection=request.connection,
            incremental_column=incremental_column,
        )
        logger.info(f"Built {plan} for {request}")
        logger.debug(f"Query: {query}")
        return plan
