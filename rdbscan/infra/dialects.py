import logging
import re
from typing import Dict

from sqlalchemy.dialects.mssql.base import MSDialect
from sqlalchemy.dialects.mysql.base import MySQLDialect
from sqlalchemy.dialects.oracle.base import OracleDialect
from sqlalchemy.dialects.postgresql.base import PGDialect
from sqlalchemy.dialects.sqlite.base import SQLiteDialect

from rdbscan.domain.models import Dialect
from rdbscan.exceptions import ConfigurationError, UnsupportedDialect

logger = logging.getLogger(__name__)


def _oracle_url(url: str, driver: str) -> str:
    # oracle:thin:@//host:port/service, oracle:thin:@host:port/service or oracle:thin:@host:port:SID
    match = re.match(r"oracle:thin:@(//)?([^:/]+)(?::(\d+))?([:/])(.+)$", url)
    if not match:
        raise ConfigurationError(f"Cannot convert jdbc url 'jdbc:{url}'")

    slashes, host, port, separator, database = match.groups()
    netloc = f"{host}:{port}" if port else host
    if separator == "/" or slashes:
        return f"{driver}://{netloc}/?service_name={database}"
    return f"{driver}://{netloc}/{database}"


def _sqlserver_url(url: str, driver: str) -> str:
    # sqlserver://host:port;databaseName=db;encrypt=true
    if not url.startswith("sqlserver://"):
        raise ConfigurationError(f"Cannot convert jdbc url 'jdbc:{url}'")

    netloc, *properties = url[len("sqlserver://") :].split(";")
    options = dict(
        prop.split("=", maxsplit=1) for prop in properties if "=" in prop
    )
    options = {k.lower(): v for k, v in options.items()}
    database = options.pop("databasename", None) or options.pop("database", "")
    if options:
        logger.debug(f"Ignoring jdbc properties {sorted(options)}")
    return f"{driver}://{netloc}/{database}"


def _sqlite_url(url: str, driver: str) -> str:
    if not url.startswith("sqlite:"):
        raise ConfigurationError(f"Cannot convert jdbc url 'jdbc:{url}'")

    path = url[len("sqlite:") :]
    if path in ("", ":memory:"):
        return f"{driver}://"
    return f"{driver}:///{path}"


_DIALECTS: Dict[str, Dialect] = {
    "mysql": Dialect(
        name="mysql",
        driver="mysql+pymysql",
        fetch_size=1000,
        query_timeout=1000,
        sqlalchemy_dialect_cls=MySQLDialect,
        timestamp_template="'{timestamp}'",
        date_template="'{date}'",
    ),
    "postgresql": Dialect(
        name="postgresql",
        driver="postgresql+psycopg2",
        fetch_size=1000,
        query_timeout=1000,
        sqlalchemy_dialect_cls=PGDialect,
    ),
    "oracle": Dialect(
        name="oracle",
        driver="oracle+oracledb",
        fetch_size=1000,
        query_timeout=3000,
        sqlalchemy_dialect_cls=OracleDialect,
        # Oracle DATE carries a time component
        date_template="TO_DATE('{seconds}', 'YYYY-MM-DD HH24:MI:SS')",
        limit_template="SELECT * FROM ({sql}) WHERE ROWNUM <= {limit}",
        jdbc_url_converter=_oracle_url,
    ),
    "sqlserver": Dialect(
        name="sqlserver",
        driver="mssql+pymssql",
        fetch_size=1000,
        query_timeout=1000,
        sqlalchemy_dialect_cls=MSDialect,
        mod_template="({column} % {modulus})",
        timestamp_template="CONVERT(DATETIME2, '{timestamp}', 121)",
        date_template="CONVERT(DATE, '{date}', 23)",
        limit_template="SELECT TOP ({limit}) * FROM ({sql}) AS preview",
        jdbc_url_converter=_sqlserver_url,
    ),
    "sqlite": Dialect(
        name="sqlite",
        driver="sqlite",
        fetch_size=1000,
        query_timeout=0,
        sqlalchemy_dialect_cls=SQLiteDialect,
        mod_template="({column} % {modulus})",
        timestamp_template="'{timestamp}'",
        date_template="'{date}'",
        jdbc_url_converter=_sqlite_url,
    ),
}

_ALIASES = {
    "postgres": "postgresql",
    "mssql": "sqlserver",
}


def normalize_source_kind(source_kind: str) -> str:
    key = source_kind.strip().lower()
    if key.endswith("reader"):
        key = key[: -len("reader")]
    return _ALIASES.get(key, key)


def get_dialect(source_kind: str) -> Dialect:
    try:
        return _DIALECTS[normalize_source_kind(source_kind)]
    except KeyError:
        raise UnsupportedDialect(
            f"No dialect registered for source kind '{source_kind}'. "
            f"Supported: {', '.join(sorted(_DIALECTS))}"
        ) from None


def register_dialect(dialect: Dialect, *aliases: str):
    _DIALECTS[dialect.name] = dialect
    for alias in aliases:
        _ALIASES[alias] = dialect.name


def supported_source_kinds():
    return sorted(_DIALECTS)
