import re
from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Callable, Optional, Type, Union

from sqlalchemy.engine import Dialect as SqlAlchemyDialect

from rdbscan.exceptions import ConfigurationError
from rdbscan.utils import try_number


class TypeCategory(str, Enum):
    NUMERIC = "NUMERIC"
    TIMESTAMP = "TIMESTAMP"
    DATE = "DATE"
    TEXT = "TEXT"


_NUMERIC_TYPES = {
    "BIT",
    "TINYINT",
    "SMALLINT",
    "MEDIUMINT",
    "INT",
    "INTEGER",
    "BIGINT",
    "SERIAL",
    "BIGSERIAL",
    "SMALLSERIAL",
    "NUMBER",
    "NUMERIC",
    "DECIMAL",
    "DEC",
    "FLOAT",
    "DOUBLE",
    "REAL",
    "BINARY_FLOAT",
    "BINARY_DOUBLE",
    "MONEY",
    "INT2",
    "INT4",
    "INT8",
    "FLOAT4",
    "FLOAT8",
}
_TIMESTAMP_TYPES = {
    "TIMESTAMP",
    "TIMESTAMPTZ",
    "DATETIME",
    "DATETIME2",
    "SMALLDATETIME",
    "DATETIMEOFFSET",
}


def classify_type(native_type: str) -> TypeCategory:
    """Map a native column type (`BIGINT UNSIGNED`, `timestamp(6)`, ...) on a category."""
    match = re.match(r"\s*([A-Za-z_][A-Za-z0-9_]*)", native_type or "")
    base = match.group(1).upper() if match else ""
    if base in _NUMERIC_TYPES:
        return TypeCategory.NUMERIC
    if base in _TIMESTAMP_TYPES:
        return TypeCategory.TIMESTAMP
    if base == "DATE":
        return TypeCategory.DATE
    return TypeCategory.TEXT


def _to_datetime(value) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, str):
        number = try_number(value.strip())
        if isinstance(number, str):
            try:
                return _to_datetime(datetime.fromisoformat(number))
            except ValueError:
                raise ConfigurationError(
                    f"Watermark '{value}' is not a valid timestamp"
                ) from None
        value = number
    if isinstance(value, (int, float)):
        # Numeric watermarks on temporal columns are epoch milliseconds
        return datetime.fromtimestamp(value / 1000, timezone.utc).replace(tzinfo=None)
    raise ConfigurationError(f"Cannot use {value!r} as a temporal watermark")


def _to_number(value) -> Union[int, float, Decimal]:
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        number = try_number(value.strip())
        if not isinstance(number, str):
            return number
    raise ConfigurationError(f"Cannot use {value!r} as a numeric watermark")


def _format_timestamp(value: datetime) -> str:
    if value.microsecond:
        return value.strftime("%Y-%m-%d %H:%M:%S.%f")
    return value.strftime("%Y-%m-%d %H:%M:%S")


def _quote_string(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _default_url(url: str, driver: str) -> str:
    scheme, sep, rest = url.partition("://")
    if not sep:
        raise ConfigurationError(f"Cannot convert jdbc url 'jdbc:{url}'")
    return f"{driver}://{rest}"


class Dialect:
    """SQL fragments and defaults for one database product.

    Fragment templates use `str.format` placeholders:

    - `mod_template`: `column`, `modulus` (the remainder expression)
    - `timestamp_template` / `date_template`: `timestamp` (fractional seconds
      only when present), `seconds` (no fractional part), `date`
    - `limit_template`: `sql`, `limit`
    """

    def __init__(
        self,
        name: str,
        driver: str,
        fetch_size: int,
        query_timeout: int,
        sqlalchemy_dialect_cls: Type[SqlAlchemyDialect],
        mod_template: str = "MOD({column},{modulus})",
        timestamp_template: str = "TIMESTAMP '{timestamp}'",
        date_template: str = "DATE '{date}'",
        limit_template: str = "{sql} LIMIT {limit}",
        jdbc_url_converter: Callable[[str, str], str] = _default_url,
    ):
        self.name = name
        self.driver = driver
        self.fetch_size = fetch_size
        self.query_timeout = query_timeout
        self.sqlalchemy_dialect_cls = sqlalchemy_dialect_cls
        self.mod_template = mod_template
        self.timestamp_template = timestamp_template
        self.date_template = date_template
        self.limit_template = limit_template
        self.jdbc_url_converter = jdbc_url_converter
        self._sqlalchemy_dialect: Optional[SqlAlchemyDialect] = None

    @property
    def sqlalchemy_dialect(self) -> SqlAlchemyDialect:
        if self._sqlalchemy_dialect is None:
            self._sqlalchemy_dialect = self.sqlalchemy_dialect_cls()
        return self._sqlalchemy_dialect

    def quote_identifier(self, name: str) -> str:
        return self.sqlalchemy_dialect.identifier_preparer.quote(name)

    def quote_table(self, table: str) -> str:
        return ".".join(self.quote_identifier(part) for part in table.split("."))

    def format_literal(self, value, native_type: Optional[str]) -> str:
        category = classify_type(native_type)
        if category == TypeCategory.NUMERIC:
            return str(_to_number(value))

        if category in (TypeCategory.TIMESTAMP, TypeCategory.DATE):
            value = _to_datetime(value)
            template = (
                self.timestamp_template
                if category == TypeCategory.TIMESTAMP
                else self.date_template
            )
            return template.format(
                timestamp=_format_timestamp(value),
                seconds=value.strftime("%Y-%m-%d %H:%M:%S"),
                date=value.strftime("%Y-%m-%d"),
            )

        if isinstance(value, datetime):
            value = _format_timestamp(value)
        elif isinstance(value, date):
            value = value.strftime("%Y-%m-%d")
        return _quote_string(str(value))

    def mod_predicate(self, column: str, modulus, remainder) -> str:
        """Rows of partition `remainder` when splitting `column` in `modulus` parts.

        The remainder of a negative key carries the key's sign on every
        supported database, so partition `i` also takes remainder `-i`. Rows
        with a NULL key go to partition 0.

        `modulus` and `remainder` are either numbers or bind parameter names
        (`:split_remainder`); with bind parameters one statement serves every
        partition.
        """
        quoted = self.quote_identifier(column)
        expression = self.mod_template.format(column=quoted, modulus=modulus)
        if isinstance(remainder, int):
            if remainder == 0:
                return f"({expression}=0 OR {quoted} IS NULL)"
            return f"ABS({expression})={remainder}"
        return (
            f"(ABS({expression})={remainder} "
            f"OR ({remainder}=0 AND {quoted} IS NULL))"
        )

    def incremental_predicate(
        self, column: str, native_type: Optional[str], value, operator: str
    ) -> str:
        return f"{self.quote_identifier(column)} {operator} {self.format_literal(value, native_type)}"

    def limit(self, sql: str, limit: int) -> str:
        return self.limit_template.format(sql=sql, limit=int(limit))

    def normalize_url(self, url: str) -> str:
        url = url.strip()
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)

        if not url.startswith("jdbc:"):
            return url
        return self.jdbc_url_converter(url[len("jdbc:") :], self.driver)

    def __repr__(self):
        return f'<Dialect name="{self.name}" driver="{self.driver}">'
