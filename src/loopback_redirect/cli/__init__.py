from .main import EXIT_IO_FAILURE, EXIT_TIMEOUT, app, main


__all__ = [
    "EXIT_IO_FAILURE",
    "EXIT_TIMEOUT",
    "app",
    "main",
]
