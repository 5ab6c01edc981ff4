from .sqlalchemy import PartitionResult, SqlAlchemyScanExecutor

__all__ = ["PartitionResult", "SqlAlchemyScanExecutor"]
