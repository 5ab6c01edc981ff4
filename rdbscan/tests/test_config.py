import json
from unittest.mock import Mock

import pytest
import yaml
from botocore.exceptions import ClientError

from rdbscan import main
from rdbscan.application.secrets_manager import SecretsManager
from rdbscan.exceptions import ConfigurationError, UnsupportedDialect
from rdbscan.main import build_source, get_plans, get_read_requests


def _write_config(tmp_path, config) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config))
    return str(path)


def test_get_plans_from_config(tmp_path, sqlite_database):
    config_file = _write_config(
        tmp_path,
        {
            "sources": {"shop": {"type": "sqlitereader", "url": sqlite_database.url}},
            "reads": [
                {
                    "name": "orders",
                    "source": "shop",
                    "table": "orders",
                    "column": ["id", {"name": "amount", "type": "NUMERIC"}],
                    "where": "status='OK'",
                    "num_partitions": 2,
                    "splitPk": "id",
                    "increColumn": "updated_at",
                    "startLocation": "2024-01-10 10:00:00",
                }
            ],
        },
    )

    plans = get_plans(config_file)

    assert len(plans) == 1
    plan = plans[0]
    assert plan.column_names == ("id", "amount", "updated_at")
    assert plan.projection[1].type == "NUMERIC"
    base = (
        "SELECT id, amount, updated_at FROM orders WHERE status='OK' "
        "AND updated_at > '2024-01-10 10:00:00' AND "
    )
    assert [p.sql for p in plan.partitions] == [
        base + "((id % 2)=0 OR id IS NULL)",
        base + "ABS((id % 2))=1",
    ]


def test_env_variables_in_config(tmp_path, monkeypatch, metadata_resolver):
    monkeypatch.setenv("SHOP_PASSWORD", "s3cret")
    path = tmp_path / "config.yaml"
    path.write_text(
        """
sources:
  shop:
    type: mysql
    url: jdbc:mysql://localhost:3306/shop
    username: reader
    password: !ENV ${SHOP_PASSWORD}
reads:
  - source: shop
    table: orders
    columns: [id]
"""
    )

    plans = get_plans(str(path), metadata_resolver=metadata_resolver)

    connection = plans[0].connection
    assert connection.url == "mysql+pymysql://localhost:3306/shop"
    assert connection.password.get_secret_value() == "s3cret"
    assert plans[0].query == "SELECT id FROM orders"


def test_unknown_source():
    with pytest.raises(ConfigurationError):
        get_read_requests({"reads": [{"source": "missing", "table": "orders"}]})


def test_source_without_url():
    with pytest.raises(ConfigurationError):
        build_source("shop", {"type": "mysql"})


def test_unsupported_source_type():
    with pytest.raises(UnsupportedDialect):
        build_source("shop", {"type": "informix", "url": "informix://db"})


def test_invalid_read():
    sources = {"shop": {"type": "postgresql", "url": "postgresql://db/shop"}}
    with pytest.raises(ConfigurationError):
        get_read_requests(
            {
                "sources": sources,
                "reads": [{"source": "shop", "table": "orders", "columns": ["id"], "parallelism": 0}],
            }
        )


@pytest.mark.parametrize(
    "read_key,value",
    [("source_kind", "mysql"), ("connection", {"url": "mysql://db/shop"})],
)
def test_read_cannot_override_source(read_key, value):
    sources = {"shop": {"type": "postgresql", "url": "postgresql://db/shop"}}
    with pytest.raises(ConfigurationError) as exc_info:
        get_read_requests(
            {
                "sources": sources,
                "reads": [
                    {"source": "shop", "table": "orders", "columns": ["id"], read_key: value}
                ],
            }
        )

    assert read_key in str(exc_info.value)


def test_source_from_secret(monkeypatch):
    secrets_manager = SecretsManager()
    secrets_manager._aws_client = Mock()
    secrets_manager._aws_client.get_secret_value.return_value = {
        "SecretString": json.dumps(
            {
                "engine": "postgres",
                "host": "db",
                "port": 5432,
                "dbname": "shop",
                "username": "reader",
                "password": "s3cret",
            }
        )
    }
    monkeypatch.setattr(main, "secrets_manager", secrets_manager)

    source = build_source("shop", {"type": "postgresql", "url": "vault+aws://shop/db"})

    secrets_manager._aws_client.get_secret_value.assert_called_once_with(
        SecretId="shop/db"
    )
    assert source["source_kind"] == "postgresql"
    assert source["connection"].url == "postgresql://db:5432/shop"
    assert source["connection"].username == "reader"


def test_missing_secret():
    secrets_manager = SecretsManager()
    secrets_manager._aws_client = Mock()
    secrets_manager._aws_client.get_secret_value.side_effect = ClientError(
        {"Error": {"Code": "ResourceNotFoundException", "Message": "not found"}},
        "GetSecretValue",
    )

    with pytest.raises(ConfigurationError):
        secrets_manager.load_as_connection("vault+aws://shop/db")
