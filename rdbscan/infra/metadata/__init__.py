from .sqlalchemy import SqlAlchemyMetadataResolver

__all__ = ["SqlAlchemyMetadataResolver"]
