import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, FrozenSet, List, Optional, Sequence, Tuple, Union as TypingUnion

from .conf import FROM_SETTINGS, get_setting
from .dfa import Dfa
from .exceptions import MonoidLimitExceeded
from .nfa import ALPHABET_SIZE, as_bytes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionPat:
    """
    The effect a word has on every DFA state at once.

    ``pat[i]`` is the state reached from state i. Index ``len(pat) - 1`` is
    the dead state: it stands for "already rejected" and always maps to itself.
    """
    pat: Tuple[int, ...]

    @classmethod
    def identity(cls, dfa_size: int) -> 'TransitionPat':
        return cls(tuple(range(dfa_size + 1)))

    @classmethod
    def generator(cls, dfa: Dfa, byte: int) -> 'TransitionPat':
        """The pattern induced by reading the single byte ``byte``."""
        dead = len(dfa.states)
        pat = []
        for state in dfa.states:
            target = state.transitions[byte]
            pat.append(dead if target is None else target)
        pat.append(dead)
        return cls(tuple(pat))

    @property
    def dead(self) -> int:
        return len(self.pat) - 1

    def multiply(self, other: 'TransitionPat') -> 'TransitionPat':
        """Apply this pattern's word, then ``other``'s."""
        return TransitionPat(tuple(other.pat[state] for state in self.pat))

    def __len__(self):
        return len(self.pat)

    def __getitem__(self, state: int) -> int:
        return self.pat[state]


class Monoid:
    """
    Transition monoid of a DFA.

    Elements are indexed in discovery order; index 0 is the identity.
    ``char_morphism[b]`` is the element induced by byte b.
    """

    identity = 0

    def __init__(self, elements: Sequence[TransitionPat], multiply_table: List[List[int]],
                 char_morphism: List[int], accepting_states: FrozenSet[int]):
        self.elements = tuple(elements)
        self.multiply_table = multiply_table
        self.char_morphism = char_morphism
        self.accepting_states = accepting_states

    def __len__(self):
        return len(self.elements)

    @property
    def size(self) -> int:
        return len(self.multiply_table)

    def multiply(self, x: int, y: int) -> int:
        return self.multiply_table[x][y]

    def power(self, x: int, exponent: int) -> int:
        result = self.identity
        for _ in range(exponent):
            result = self.multiply(result, x)
        return result

    def evaluate(self, word: TypingUnion[str, bytes]) -> int:
        """Image of ``word`` under the syntactic morphism."""
        element = self.identity
        for byte in as_bytes(word):
            element = self.multiply(element, self.char_morphism[byte])
        return element

    def accepts(self, word: TypingUnion[str, bytes]) -> bool:
        """A word is accepted iff its element sends the initial state to an accepting one."""
        return self.elements[self.evaluate(word)][0] in self.accepting_states

    def idempotents(self) -> List[int]:
        return [x for x in range(self.size) if self.multiply(x, x) == x]

    def _powers_stabilise(self, x: int) -> bool:
        # By pigeonhole the powers of x cycle within size steps
        power = x
        for _ in range(self.size):
            following = self.multiply(power, x)
            if following == power:
                return True
            power = following
        return False

    def is_aperiodic(self) -> bool:
        """
        Check whether every element x satisfies x^k = x^(k+1) for some k >= 1.

        An aperiodic transition monoid has no nontrivial cyclic subgroup, which
        holds exactly when the minimal DFA's language is star-free.
        """
        for x in range(self.size):
            if not self._powers_stabilise(x):
                logger.debug("Element %d of the monoid generates a nontrivial cycle", x)
                return False
        return True

    def __repr__(self):
        return f"Monoid(size={self.size})"


def build_monoid(dfa: Dfa, max_elements: Optional[int] = FROM_SETTINGS) -> Monoid:
    """
    Enumerate the transition monoid generated by the single-byte actions on ``dfa``.

    Starting from the identity, every discovered element is composed with each
    generator until no new pattern appears.

    Args:
        dfa (Dfa): The (possibly non-minimal) DFA
        max_elements (int, optional): Upper bound on the number of elements.
            None means unbounded; when omitted the MONOID_ELEMENT_LIMIT
            setting applies.

    Returns:
        Monoid: Elements, full multiplication table and the byte morphism

    Raises:
        MonoidLimitExceeded: If the closure grows past ``max_elements``
    """
    if max_elements is FROM_SETTINGS:
        max_elements = get_setting('MONOID_ELEMENT_LIMIT')

    generators = [TransitionPat.generator(dfa, byte) for byte in range(ALPHABET_SIZE)]
    # Most bytes share a generator; composing with duplicates finds nothing new
    distinct_generators = list(dict.fromkeys(generators))

    identity = TransitionPat.identity(len(dfa.states))
    index: Dict[TransitionPat, int] = {identity: 0}
    elements: List[TransitionPat] = [identity]
    queue: Deque[TransitionPat] = deque([identity])

    while queue:
        pat = queue.popleft()
        for generator in distinct_generators:
            product = pat.multiply(generator)
            if product in index:
                continue
            if max_elements is not None and len(elements) >= max_elements:
                raise MonoidLimitExceeded(max_elements)
            index[product] = len(elements)
            elements.append(product)
            queue.append(product)

    char_morphism = [index[generator] for generator in generators]
    multiply_table = [[index[x.multiply(y)] for y in elements] for x in elements]

    logger.debug("Transition monoid of a %d-state DFA has %d elements", len(dfa), len(elements))
    return Monoid(elements, multiply_table, char_morphism, frozenset(dfa.accepting_states))
