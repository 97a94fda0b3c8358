"""Converter registry — maps an ordered format pair to its converters.

The registry is filled once at start-up and then frozen; lookups after that
need no locking because nothing writes to it again.
"""

import logging

from chatbridge.core.errors import RegistryFrozenError
from chatbridge.core.interface.transpiler import ConverterPair, ConvertFn

logger = logging.getLogger(__name__)


def pair_key(source: str, target: str) -> str:
    return f"{source}->{target}"


class ConverterRegistry:
    """Maps ``"source->target"`` keys to request/response converter pairs."""

    def __init__(self) -> None:
        self._pairs: dict[str, ConverterPair] = {}
        self._frozen = False

    def register(
        self,
        source: str,
        target: str,
        request: ConvertFn,
        response: ConvertFn,
    ) -> None:
        """Register converters for *source* -> *target*. Last write wins.

        Raises:
            RegistryFrozenError: If :meth:`freeze` has been called.
        """
        key = pair_key(source, target)
        if self._frozen:
            raise RegistryFrozenError(key)
        if key in self._pairs:
            logger.debug("Replacing converter pair %s", key)
        self._pairs[key] = ConverterPair(request=request, response=response)

    def lookup(self, source: str, target: str) -> ConverterPair | None:
        """Return the converters for *source* -> *target*, or ``None``."""
        return self._pairs.get(pair_key(source, target))

    def pairs(self) -> list[tuple[str, str]]:
        """Return the registered ordered pairs in registration order."""
        result: list[tuple[str, str]] = []
        for key in self._pairs:
            source, target = key.split("->", 1)
            result.append((source, target))
        return result

    def freeze(self) -> None:
        """Reject any further registration."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, pair: tuple[str, str]) -> bool:
        return pair_key(*pair) in self._pairs

    def __len__(self) -> int:
        return len(self._pairs)
