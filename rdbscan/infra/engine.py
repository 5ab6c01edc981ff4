import logging
import threading
from typing import Dict, Optional

from sqlalchemy import Engine, create_engine

from rdbscan.domain.models import ConnectionParams
from rdbscan.exceptions import ConfigurationError
from rdbscan.utils import get_concurrency

logger = logging.getLogger(__name__)


class SqlAlchemyEngineProvider:
    """Hands out one SQLAlchemy engine per database url."""

    @staticmethod
    def fix_url(url: str) -> str:
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://")
        return url

    def __init__(self, pool_size: int = 0):
        self.pool_size = pool_size or get_concurrency()
        self._engines: Dict[str, Engine] = {}
        self._lock = threading.Lock()

    def __getstate__(self):
        return {"pool_size": self.pool_size}

    def __setstate__(self, state):
        self.__init__(pool_size=state["pool_size"])

    def _create_engine(self, connection: ConnectionParams) -> Engine:
        url = connection.to_sqlalchemy_url()
        if url.get_backend_name() == "sqlite":
            # Pool sizing is left to the SQLite defaults
            return create_engine(url)

        return create_engine(
            url,
            pool_size=self.pool_size,
            max_overflow=5,
            pool_recycle=1800,
            pool_pre_ping=True,
        )

    def get(self, connection: Optional[ConnectionParams]) -> Engine:
        if connection is None:
            raise ConfigurationError("No connection configured for this source")

        key = connection.to_sqlalchemy_url().render_as_string(hide_password=False)
        with self._lock:
            engine = self._engines.get(key)
            if engine is None:
                connection = connection.model_copy(
                    update={"url": self.fix_url(connection.url)}
                )
                engine = self._create_engine(connection)
                self._engines[key] = engine
        return engine

    def close(self):
        with self._lock:
            for engine in self._engines.values():
                engine.dispose()
            self._engines.clear()

    def __del__(self):
        if hasattr(self, "_engines"):
            self.close()
