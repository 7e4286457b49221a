class NewsCredError(Exception):
    """Base class for errors raised by the credibility engine."""


class InvalidInputError(NewsCredError, ValueError):
    """Caller supplied an article or rating the engine cannot work with."""


class ComputationGuardError(NewsCredError, ArithmeticError):
    """Raised internally when a ratio has an empty denominator.

    Never escapes the feature extractors: the guard resolves it to 0.0.
    """


class StorageError(NewsCredError):
    """The persistence collaborator rejected or failed a write."""
