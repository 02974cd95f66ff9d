class NonmemToolsInfrastructureError(Exception):
    pass


class DataSourceError(NonmemToolsInfrastructureError):
    pass


class DataSourceNotFoundError(DataSourceError):
    pass


class DataParseError(DataSourceError):
    pass


class DataWriteError(NonmemToolsInfrastructureError):
    pass
