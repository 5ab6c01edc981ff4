import json
from json import JSONDecodeError
from urllib.parse import urlparse

import boto3
from botocore.exceptions import ClientError

from rdbscan.exceptions import ConfigurationError


class SecretsManager:
    def __init__(self):
        self._aws_client = None

    @property
    def aws_client(self):
        if not self._aws_client:
            self._aws_client = boto3.client("secretsmanager")
        return self._aws_client

    def load_as_dict(self, url: str) -> dict:
        """Load a secret from the supported vault. In this case only AWS Secrets Manager"""
        parts = urlparse(url)
        if parts.scheme != "vault+aws":
            raise ConfigurationError(f"Secret url '{url}' is not supported.")

        secret_id = parts.netloc + parts.path
        try:
            item = self.aws_client.get_secret_value(SecretId=secret_id)
        except ClientError as err:
            if err.response["Error"]["Code"] == "ResourceNotFoundException":
                raise ConfigurationError(f"Couldn't find secret: {url}")
            raise

        try:
            return json.loads(item["SecretString"])
        except JSONDecodeError:
            raise ConfigurationError(f"Secret url '{url}' could not be parsed.")

    def supports(self, url: str):
        return isinstance(url, str) and url.startswith("vault+aws://")

    def load_as_connection(self, secret_uri: str) -> dict:
        """Load the secret and return url, username and password for a source.

        The secret uses the layout of RDS secrets: engine, host, port, dbname,
        username and password.
        """
        secrets = self.load_as_dict(secret_uri)
        try:
            return {
                "url": (
                    f"{secrets['engine']}://"
                    f"{secrets['host']}:{secrets['port']}"
                    f"/{secrets['dbname']}"
                ),
                "username": secrets["username"],
                "password": secrets["password"],
            }
        except KeyError as e:
            raise ConfigurationError(
                f"Secret '{secret_uri}' is missing key {e}"
            ) from None
