"""
Link tokens -- run-scoped identifiers that pair a debt with its credit.

Responsibility:
    Provides an injectable token source so the reducer never mints
    identifiers on its own.

Architecture position:
    Kernel > Domain -- pure except UuidTokenSource, which reads the OS
    random source.

Invariants enforced:
    - Every token issued by one source instance is unique.
    - Tokens are never persisted; a fresh source is used per replay.
"""

from abc import ABC, abstractmethod
from itertools import count
from uuid import uuid4


class TokenSource(ABC):
    """
    Abstract link-token source.

    Contract:
        ``next_token()`` returns a string never returned before by the
        same instance.
    """

    @abstractmethod
    def next_token(self) -> str:
        """Mint a fresh token."""
        ...


class CounterTokenSource(TokenSource):
    """
    Deterministic source: ``t1``, ``t2``, ...

    Two replays of the same ledger produce identical tokens.
    """

    def __init__(self, prefix: str = "t"):
        self._prefix = prefix
        self._counter = count(1)

    def next_token(self) -> str:
        return f"{self._prefix}{next(self._counter)}"


class UuidTokenSource(TokenSource):
    """Random source. Tokens differ between replays."""

    def next_token(self) -> str:
        return uuid4().hex


TOKEN_STRATEGIES: dict[str, type[TokenSource]] = {
    "counter": CounterTokenSource,
    "uuid": UuidTokenSource,
}


def make_token_source(strategy: str = "counter") -> TokenSource:
    """Build a fresh token source for the named strategy."""
    try:
        return TOKEN_STRATEGIES[strategy]()
    except KeyError:
        raise ValueError(
            f"Unknown token strategy {strategy!r}; "
            f"expected one of {sorted(TOKEN_STRATEGIES)}"
        ) from None
