"""Key -> factor index lookup."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Dict, Iterator, List, Tuple

from ..keys import Key
from .factor_graph import FactorGraph


class VariableIndex(Mapping):
    """
    For every key, the indices of the factors that reference it.

    Built once from a graph and read-only afterwards. It is a snapshot,
    not a live view: factors added to the graph later are not indexed.

    Example:
        >>> index = VariableIndex(graph)
        >>> index["x"]
        (0, 2)
    """

    def __init__(self, graph: FactorGraph) -> None:
        index: Dict[Key, List[int]] = {}
        for ix, factor in enumerate(graph):
            for key in factor.keys():
                index.setdefault(key, []).append(ix)
        self._index: Mapping[Key, Tuple[int, ...]] = MappingProxyType(
            {key: tuple(ixs) for key, ixs in index.items()}
        )
        self.n_factors = len(graph)

    def __getitem__(self, key: Key) -> Tuple[int, ...]:
        return self._index[key]

    def get(self, key: Key, default: Tuple[int, ...] = ()) -> Tuple[int, ...]:
        return self._index.get(key, default)

    def __iter__(self) -> Iterator[Key]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"VariableIndex(keys={len(self)}, factors={self.n_factors})"
