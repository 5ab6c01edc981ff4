import logging
import os
import sys
from pathlib import Path
from typing import Optional

import click
from dotenv import find_dotenv, load_dotenv

from rdbscan import __version__
from rdbscan.exceptions import RdbScanError
from rdbscan.infra.engine import SqlAlchemyEngineProvider
from rdbscan.infra.executor import SqlAlchemyScanExecutor
from rdbscan.infra.metadata import SqlAlchemyMetadataResolver
from rdbscan.main import get_plans
from rdbscan.utils import sanitize_exception_message

logger = logging.getLogger(__name__)


def get_default_config() -> Path:
    return Path(os.environ.get("RDBSCAN_CONFIG_FILE", "config.yaml"))


def _get_plans_or_exit(config_file: str, debug: Optional[bool], **kwargs):
    try:
        return get_plans(config_file, **kwargs)
    except RdbScanError as e:
        if debug:
            raise
        else:
            logger.exception(
                f"Failed to build extraction plans: {sanitize_exception_message(str(e))}"
            )
            sys.exit(1)


@click.group()
@click.version_option(__version__)
def cli():
    pass


@cli.command()
@click.option(
    "--config",
    "config_file",
    required=False,
    help="Yaml config file",
    type=click.Path(exists=True),
    default=get_default_config,
)
@click.option("--debug", "debug", required=False, help="Debugging enabled", type=bool)
def plan(config_file: str, debug: Optional[bool]):
    """Print the statements every configured read will run."""
    engine_provider = SqlAlchemyEngineProvider()
    try:
        plans = _get_plans_or_exit(
            config_file, debug, engine_provider=engine_provider
        )
    finally:
        engine_provider.close()

    for extraction_plan in plans:
        click.echo(f"-- {extraction_plan}")
        click.echo(
            f"-- fetch_size={extraction_plan.fetch_size} query_timeout={extraction_plan.query_timeout}"
        )
        for partition in extraction_plan.partitions:
            click.echo(f"{partition.sql};")

    logger.info("Done")


@cli.command()
@click.option(
    "--config",
    "config_file",
    required=False,
    help="Yaml config file",
    type=click.Path(exists=True),
    default=get_default_config,
)
@click.option("--debug", "debug", required=False, help="Debugging enabled", type=bool)
@click.option(
    "--dry-run",
    "dry_run",
    required=False,
    help="Dry run - build the plans but don't query the source",
    is_flag=True,
    type=bool,
)
def run(config_file: str, debug: Optional[bool], dry_run: Optional[bool]):
    """Build the plans and scan every partition."""
    engine_provider = SqlAlchemyEngineProvider()
    executor = SqlAlchemyScanExecutor(engine_provider)
    try:
        plans = _get_plans_or_exit(
            config_file,
            debug,
            metadata_resolver=SqlAlchemyMetadataResolver(engine_provider),
        )
        for extraction_plan in plans:
            results = executor.execute(extraction_plan, dry_run=dry_run)
            row_count = sum(result.row_count for result in results)
            click.echo(f"{extraction_plan}: {row_count} rows")
    finally:
        engine_provider.close()

    logger.info("Done")


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    path = find_dotenv(usecwd=True)
    load_dotenv(path)

    cli(obj={})


if __name__ == "__main__":
    main()
