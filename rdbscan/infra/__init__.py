from .dialects import get_dialect, register_dialect, supported_source_kinds
from .engine import SqlAlchemyEngineProvider
from .executor import SqlAlchemyScanExecutor
from .metadata import SqlAlchemyMetadataResolver

__all__ = [
    "get_dialect",
    "register_dialect",
    "supported_source_kinds",
    "SqlAlchemyEngineProvider",
    "SqlAlchemyScanExecutor",
    "SqlAlchemyMetadataResolver",
]
