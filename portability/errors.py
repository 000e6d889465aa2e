"""
Error types raised by the portability job layer.

Store failures are not wrapped: OSError and SQLAlchemy errors reach the
caller exactly as the store raised them.
"""


class InvalidArgument(ValueError):
    """Raised when a job record, stored mapping or lookup key is malformed."""
    pass


def check_argument(condition: bool, message: str) -> None:
    """Raise InvalidArgument with ``message`` unless ``condition`` holds."""
    if not condition:
        raise InvalidArgument(message)
