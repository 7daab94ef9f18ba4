class LoggingError(Exception):
    pass


class LogfileError(LoggingError):
    pass
