"""
Variable keys.

Primal variables are addressed by any hashable key. Lagrange multipliers
are addressed by :class:`DualKey`, generated in factor-insertion order.
"""

from typing import Hashable, Iterable, NamedTuple

Key = Hashable


class DualKey(NamedTuple):
    """Key of the multiplier attached to one constraint factor."""

    role: str
    index: int

    def __repr__(self) -> str:
        return f"lambda_{self.role}{self.index}"


class KeyGenerator:
    """
    Deterministic source of dual keys for one constraint role.

    Example:
        >>> gen = KeyGenerator("ineq")
        >>> gen.next(), gen.next()
        (lambda_ineq0, lambda_ineq1)
    """

    def __init__(self, role: str, start: int = 0) -> None:
        self.role = role
        self._next = start

    def next(self) -> DualKey:
        key = DualKey(self.role, self._next)
        self._next += 1
        return key

    def skip(self, used: Iterable[Key]) -> None:
        """Advance past dual keys of this role that are already in use."""
        for key in used:
            if isinstance(key, DualKey) and key.role == self.role:
                self._next = max(self._next, key.index + 1)
