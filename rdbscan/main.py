import logging
from typing import Dict, List, Optional

from pyaml_env import parse_config
from pydantic import ValidationError

from rdbscan.application.plan_assembler import ExtractionPlanAssembler
from rdbscan.application.secrets_manager import SecretsManager
from rdbscan.domain.models import (
    ConnectionParams,
    ExtractionPlan,
    MetadataResolver,
    ReadRequest,
)
from rdbscan.exceptions import ConfigurationError
from rdbscan.infra.dialects import get_dialect
from rdbscan.infra.engine import SqlAlchemyEngineProvider
from rdbscan.infra.metadata import SqlAlchemyMetadataResolver

logger = logging.getLogger(__name__)

secrets_manager = SecretsManager()

# Configuration keys as used by the original reader jobs
_READ_KEY_ALIASES = {
    "column": "columns",
    "num_partitions": "parallelism",
    "splitPk": "split_key",
    "increColumn": "incremental_column",
    "startLocation": "start_location",
    "fetchSize": "fetch_size",
    "queryTimeOut": "query_timeout",
}


def build_source(name: str, source_args: dict) -> dict:
    """Turn a `sources:` entry into source kind and `ConnectionParams`."""
    if "type" not in source_args:
        raise ConfigurationError(f"Source '{name}' has no type")

    dialect = get_dialect(source_args["type"])

    connection_args = {
        "url": source_args.get("url"),
        "username": source_args.get("username"),
        "password": source_args.get("password"),
    }
    if connection_args["password"] is not None:
        connection_args["password"] = str(connection_args["password"])
    if secrets_manager.supports(connection_args["url"]):
        connection_args = secrets_manager.load_as_connection(connection_args["url"])

    if not connection_args["url"]:
        raise ConfigurationError(f"Source '{name}' has no url")

    connection_args["url"] = dialect.normalize_url(connection_args["url"])
    try:
        connection = ConnectionParams(**connection_args)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid connection for source '{name}': {e}") from e

    return {"source_kind": dialect.name, "connection": connection}


def build_read_request(read_args: dict, sources: Dict[str, dict]) -> ReadRequest:
    read_args = {_READ_KEY_ALIASES.get(k, k): v for k, v in read_args.items()}

    source_name = read_args.pop("source", None)
    if source_name not in sources:
        raise ConfigurationError(
            f"Read of '{read_args.get('table')}' refers to unknown source '{source_name}'"
        )

    read_args.pop("name", None)
    overridden = sorted(set(read_args) & set(sources[source_name]))
    if overridden:
        raise ConfigurationError(
            f"Read of '{read_args.get('table')}' sets {', '.join(overridden)}, "
            f"which come from source '{source_name}'"
        )
    try:
        return ReadRequest(**sources[source_name], **read_args)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid read of '{read_args.get('table')}' on source '{source_name}': {e}"
        ) from e


def get_read_requests(config: dict) -> List[ReadRequest]:
    logger.info("Initializing sources")
    sources = {
        name: build_source(name, source_args)
        for name, source_args in (config.get("sources") or {}).items()
    }

    reads = config.get("reads") or []
    if not reads:
        logger.warning("No reads configured")
    return [build_read_request(read_args, sources) for read_args in reads]


def load_config(config_file: str) -> dict:
    config = parse_config(config_file, default_value="")
    if not isinstance(config, dict):
        raise ConfigurationError(f"Config file '{config_file}' is empty or invalid")
    return config


def get_plans(
    config_file: str,
    metadata_resolver: Optional[MetadataResolver] = None,
    engine_provider: Optional[SqlAlchemyEngineProvider] = None,
) -> List[ExtractionPlan]:
    config = load_config(config_file)
    read_requests = get_read_requests(config)

    if metadata_resolver is None:
        metadata_resolver = SqlAlchemyMetadataResolver(engine_provider)

    assembler = ExtractionPlanAssembler(metadata_resolver)
    logger.info(f"Assembling {len(read_requests)} extraction plans")
    return [assembler.assemble(read_request) for read_request in read_requests]
