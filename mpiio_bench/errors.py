class BenchmarkError(Exception):
    """Fatal error: the whole process group has to stop."""


class ConfigError(BenchmarkError):
    pass


class FileOpenError(BenchmarkError):
    pass


class FileCloseError(BenchmarkError):
    pass


class TimerError(BenchmarkError):
    pass


class FileIOError(BenchmarkError):
    pass
