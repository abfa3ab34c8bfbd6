__all__ = [
    'ETFError',
    'MissingInitialState',
    'UnknownStateError',
    'WriteError',
]


class ETFError(Exception):
    pass


class MissingInitialState(ETFError):
    """The machine's initial state is unset or not one of its states."""


class UnknownStateError(ETFError, LookupError):
    """A transition leads to a state the machine never enumerated."""


class WriteError(ETFError):
    """The output sink rejected a write. Emitted bytes must be discarded."""
