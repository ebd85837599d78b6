from typing import Iterable, Iterator


class StateSet:
    """
    Immutable, order-free set of state indices.

    Backed by a frozenset, so two sets with the same members compare and hash
    identically no matter how they were built. This makes StateSet usable as
    the key of the subset-construction map. Iteration is always ascending.
    """

    __slots__ = ('_states', '_hash')

    def __init__(self, states: Iterable[int] = ()):
        self._states = frozenset(states)
        self._hash = hash(self._states)

    def __hash__(self):
        return self._hash

    def __eq__(self, other):
        return isinstance(other, StateSet) and self._states == other._states

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._states))

    def __len__(self):
        return len(self._states)

    def __bool__(self):
        return bool(self._states)

    def __contains__(self, item):
        return item in self._states

    def __le__(self, other: 'StateSet') -> bool:
        return self._states <= other._states

    def __ge__(self, other: 'StateSet') -> bool:
        return self._states >= other._states

    def intersect(self, other: 'StateSet') -> 'StateSet':
        return StateSet(self._states & other._states)

    def union(self, other: 'StateSet') -> 'StateSet':
        return StateSet(self._states | other._states)

    def any(self, predicate) -> bool:
        return any(predicate(state) for state in self._states)

    def __repr__(self):
        return f"StateSet({sorted(self._states)})"


EMPTY = StateSet()
