class RegexMonoidError(Exception):
    """Base class for errors raised by the regex_monoid pipeline."""


class RegexSyntaxError(RegexMonoidError, ValueError):
    """The regex text could not be parsed into a syntax tree."""

    def __init__(self, message: str, position: int = None):
        if position is not None:
            message = f"{message} at position {position}"
        super().__init__(message)
        self.position = position


class UnsupportedNodeError(RegexMonoidError, ValueError):
    """The syntax tree is empty or contains a node variant the NFA builder cannot compile."""


class MonoidLimitExceeded(RegexMonoidError):
    """The transition monoid grew past the configured element limit."""

    def __init__(self, limit: int):
        super().__init__(f"Transition monoid exceeds the limit of {limit} elements")
        self.limit = limit
