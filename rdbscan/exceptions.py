class RdbScanError(Exception):
    pass


class ConfigurationError(RdbScanError):
    pass


class UnsupportedDialect(RdbScanError):
    pass


class IncrementalColumnNotFound(RdbScanError):
    def __init__(self, column: str, table: str):
        super().__init__(f"There is no '{column}' column in the '{table}' table")
        self.column = column
        self.table = table


class MetadataLookupFailure(RdbScanError):
    pass


class ScanTimeout(RdbScanError):
    pass
