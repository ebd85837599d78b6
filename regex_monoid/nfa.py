import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union as TypingUnion

from .exceptions import UnsupportedNodeError
from .state_set import EMPTY, StateSet
from .syntax_tree import Concat, Dot, Literal, Node, Star, Union

logger = logging.getLogger(__name__)

ALPHABET_SIZE = 256

# Transition key for moves that consume no input
EPSILON = None

Symbol = Optional[int]
Fragment = Tuple[int, int]


def byte_label(symbol: Symbol) -> str:
    """Human-readable label for a byte value, or 'ε' for an epsilon move."""
    if symbol is EPSILON:
        return 'ε'
    if 0x20 <= symbol < 0x7f:
        return chr(symbol)
    return f"\\x{symbol:02x}"


def as_bytes(word: TypingUnion[str, bytes]) -> bytes:
    """Input words are byte strings; text is matched as its UTF-8 encoding."""
    if isinstance(word, str):
        return word.encode('utf-8')
    if isinstance(word, (bytes, bytearray)):
        return bytes(word)
    raise TypeError(f"Input must be str or bytes, not {type(word).__name__}")


@dataclass
class NfaState:
    accept: bool = False
    transitions: Dict[Symbol, StateSet] = field(default_factory=dict)

    def targets(self, symbol: Symbol) -> StateSet:
        return self.transitions.get(symbol, EMPTY)

    def byte_symbols(self) -> List[int]:
        """Bytes with at least one outgoing transition, ascending."""
        return sorted(symbol for symbol in self.transitions if symbol is not EPSILON)


class Nfa:
    """
    Nondeterministic automaton over bytes, stored as a list of states.

    State 0 is the initial state and the last state is the only accepting one.
    Instances are never modified after NfaBuilder hands them out.
    """

    def __init__(self, states: List[NfaState]):
        self.states = states

    def __len__(self):
        return len(self.states)

    @property
    def accepting_states(self) -> List[int]:
        return [index for index, state in enumerate(self.states) if state.accept]

    def epsilon_closure(self, states: Iterable[int]) -> StateSet:
        """
        Compute the set of states reachable from ``states`` using only epsilon moves.

        Args:
            states: Seed states (a StateSet or any iterable of indices)

        Returns:
            StateSet: The seed states plus everything epsilon-reachable from them
        """
        stack = list(states)
        visited: Set[int] = set()

        while stack:
            state = stack.pop()
            visited.add(state)
            for target in self.states[state].targets(EPSILON):
                if target not in visited:
                    stack.append(target)

        return StateSet(visited)

    def move(self, states: Iterable[int], byte: int) -> StateSet:
        """Union of the byte-successors of ``states``, without closure."""
        result: Set[int] = set()
        for state in states:
            result.update(self.states[state].targets(byte))
        return StateSet(result)

    def reachable(self, state: int) -> StateSet:
        """Every direct successor of ``state`` on any byte or epsilon."""
        result: Set[int] = set()
        for targets in self.states[state].transitions.values():
            result.update(targets)
        return StateSet(result)

    def accepts(self, word: TypingUnion[str, bytes]) -> bool:
        """Simulate the NFA on ``word`` by tracking the closure of live states."""
        current = self.epsilon_closure([0])
        for byte in as_bytes(word):
            current = self.epsilon_closure(self.move(current, byte))
            if not current:
                return False
        return current.any(lambda state: self.states[state].accept)

    def edges(self):
        """Yield every (source, symbol, target) triple, bytes first then epsilon."""
        for index, state in enumerate(self.states):
            for symbol in state.byte_symbols():
                for target in state.targets(symbol):
                    yield index, symbol, target
            for target in state.targets(EPSILON):
                yield index, EPSILON, target

    def to_dict(self) -> Dict:
        """Convert to the FSA dictionary format, with epsilon keyed by ''."""
        transitions = defaultdict(lambda: defaultdict(list))
        alphabet = set()
        for source, symbol, target in self.edges():
            label = '' if symbol is EPSILON else byte_label(symbol)
            if symbol is not EPSILON:
                alphabet.add(label)
            transitions[f"q{source}"][label].append(f"q{target}")

        return {
            'states': [f"q{index}" for index in range(len(self.states))],
            'alphabet': sorted(alphabet),
            'transitions': {state: dict(moves) for state, moves in transitions.items()},
            'startingState': 'q0',
            'acceptingStates': [f"q{index}" for index in self.accepting_states]
        }

    def __repr__(self):
        return f"Nfa(states={len(self.states)}, accepting={self.accepting_states})"


class NfaBuilder:
    """Helper class to build NFAs from syntax trees by Thompson's construction."""

    def __init__(self):
        self.transitions: List[Dict[Symbol, Set[int]]] = []

    def new_state(self) -> int:
        """Append a new state and return its index."""
        self.transitions.append(defaultdict(set))
        return len(self.transitions) - 1

    def add_transition(self, from_state: int, symbol: Symbol, to_state: int):
        """Add a transition."""
        self.transitions[from_state][symbol].add(to_state)

    def build(self, tree: Node) -> Nfa:
        """
        Compile ``tree`` into an NFA.

        State 0 is a fresh start state with an epsilon move into the tree's
        entry; a final accepting state is appended after the tree is built and
        reached by an epsilon move from the tree's exit.

        Raises:
            UnsupportedNodeError: If the tree is empty or holds an unknown node variant
        """
        if tree is None:
            raise UnsupportedNodeError("Cannot build an NFA from an empty syntax tree")

        start = self.new_state()
        entry, exit_state = self._compile(tree)
        self.add_transition(start, EPSILON, entry)

        accept = self.new_state()
        self.add_transition(exit_state, EPSILON, accept)

        nfa = self.to_nfa(accept)
        logger.debug("Built NFA with %d states", len(nfa))
        return nfa

    def to_nfa(self, accept_state: int) -> Nfa:
        """Freeze the collected transitions into an Nfa."""
        states = [
            NfaState(
                accept=index == accept_state,
                transitions={symbol: StateSet(targets) for symbol, targets in moves.items()}
            )
            for index, moves in enumerate(self.transitions)
        ]
        return Nfa(states)

    def _compile(self, tree: Node) -> Fragment:
        """
        Build the fragment for ``tree`` with an explicit stack.

        Every finished subtree leaves its (entry, exit) pair on ``fragments``.
        Union and Star allocate their entry state on the first visit and
        combine their children's fragments on the second.
        """
        fragments: List[Fragment] = []
        # (node, children already pushed, entry state allocated on the first visit)
        stack: List[Tuple[Node, bool, Optional[int]]] = [(tree, False, None)]

        while stack:
            node, expanded, entry = stack.pop()

            if isinstance(node, Literal):
                fragments.append(self._symbol_fragment([node.byte]))

            elif isinstance(node, Dot):
                fragments.append(self._symbol_fragment(range(ALPHABET_SIZE)))

            elif isinstance(node, Concat):
                if not expanded:
                    stack.append((node, True, None))
                    stack.append((node.right, False, None))
                    stack.append((node.left, False, None))
                else:
                    right = fragments.pop()
                    left = fragments.pop()
                    self.add_transition(left[1], EPSILON, right[0])
                    fragments.append((left[0], right[1]))

            elif isinstance(node, Union):
                if not expanded:
                    branch = self.new_state()
                    stack.append((node, True, branch))
                    stack.append((node.right, False, None))
                    stack.append((node.left, False, None))
                else:
                    right = fragments.pop()
                    left = fragments.pop()
                    merge = self.new_state()
                    self.add_transition(entry, EPSILON, left[0])
                    self.add_transition(entry, EPSILON, right[0])
                    self.add_transition(left[1], EPSILON, merge)
                    self.add_transition(right[1], EPSILON, merge)
                    fragments.append((entry, merge))

            elif isinstance(node, Star):
                if not expanded:
                    loop_entry = self.new_state()
                    stack.append((node, True, loop_entry))
                    stack.append((node.operand, False, None))
                else:
                    body = fragments.pop()
                    loop_exit = self.new_state()
                    self.add_transition(entry, EPSILON, body[0])     # enter
                    self.add_transition(entry, EPSILON, loop_exit)   # skip
                    self.add_transition(body[1], EPSILON, loop_exit)
                    self.add_transition(loop_exit, EPSILON, entry)   # repeat
                    fragments.append((entry, loop_exit))

            else:
                raise UnsupportedNodeError(f"Unsupported syntax tree node: {type(node).__name__}")

        assert len(fragments) == 1, "every subtree must leave exactly one fragment"
        return fragments[0]

    def _symbol_fragment(self, symbols: Iterable[int]) -> Fragment:
        start = self.new_state()
        end = self.new_state()
        for symbol in symbols:
            self.add_transition(start, symbol, end)
        return start, end


def build_nfa(tree: Node) -> Nfa:
    """Compile a syntax tree into an NFA using Thompson's construction."""
    return NfaBuilder().build(tree)
