from __future__ import annotations

"""
Domain Exceptions.

Every failure raised by the documentation pass derives from ConfDocError,
so interface layers can map the whole family to an exit status while
still catching the builtin category (TypeError, ValueError, ImportError)
where that reads more naturally.
"""


class ConfDocError(Exception):
    """Base class for all documentation pass failures."""


class NotAddressableError(ConfDocError, TypeError):
    """
    The configuration value cannot provide stable storage identities.

    Raised for anything that is not a live, mutable dataclass instance.
    Flag correlation is impossible without it, so the run is aborted.
    """


class FlagRegistrationError(ConfDocError, ValueError):
    """A flag could not be registered (duplicate name or invalid binding)."""


class BlockRegistryError(ConfDocError, ValueError):
    """The root block registry is malformed or ambiguous."""


class ProviderResolutionError(ConfDocError, ImportError):
    """A 'module:attribute' provider path could not be resolved."""


class TypeResolutionError(ConfDocError, TypeError):
    """A field annotation of a configuration structure cannot be evaluated."""
