import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Set, Tuple, Union as TypingUnion

from .nfa import ALPHABET_SIZE, Nfa, as_bytes, byte_label
from .state_set import StateSet

logger = logging.getLogger(__name__)


def _empty_table() -> List[Optional[int]]:
    return [None] * ALPHABET_SIZE


@dataclass
class DfaState:
    accept: bool = False
    # One entry per byte value; None means the input is rejected
    transitions: List[Optional[int]] = field(default_factory=_empty_table)

    def defined(self) -> List[Tuple[int, int]]:
        """(byte, target) pairs for every present transition, ascending by byte."""
        return [(byte, target) for byte, target in enumerate(self.transitions) if target is not None]


class Dfa:
    """
    Deterministic automaton over bytes.

    State 0 is the initial state. Only ``minimise_dfa`` changes a Dfa after
    construction, by replacing ``states`` in place.
    """

    def __init__(self, states: List[DfaState] = None):
        self.states: List[DfaState] = states if states is not None else []

    def __len__(self):
        return len(self.states)

    @property
    def accepting_states(self) -> List[int]:
        return [index for index, state in enumerate(self.states) if state.accept]

    def new_state(self, accept: bool = False) -> int:
        self.states.append(DfaState(accept=accept))
        return len(self.states) - 1

    def copy(self) -> 'Dfa':
        return Dfa([DfaState(state.accept, list(state.transitions)) for state in self.states])

    def run(self, word: TypingUnion[str, bytes]) -> Optional[int]:
        """Return the state reached after reading ``word``, or None once a transition is missing."""
        state = 0
        for byte in as_bytes(word):
            state = self.states[state].transitions[byte]
            if state is None:
                return None
        return state

    def accepts(self, word: TypingUnion[str, bytes]) -> bool:
        state = self.run(word)
        return state is not None and self.states[state].accept

    def simulate(self, word: TypingUnion[str, bytes]) -> TypingUnion[List[Tuple[str, str, str]], Dict]:
        """
        Simulate the DFA and report the execution path.

        Returns:
            If the input is accepted, a list of (current_state, symbol, next_state)
            triples. If it is rejected, a dictionary with:
            {
                'accepted': False,
                'path': [...],  # Path up to rejection
                'rejection_reason': str,
                'rejection_position': int
            }
        """
        data = as_bytes(word)
        current_state = 0
        execution_path = []

        for position, byte in enumerate(data):
            next_state = self.states[current_state].transitions[byte]
            if next_state is None:
                return {
                    'accepted': False,
                    'path': execution_path,
                    'rejection_reason': f"No transition defined for symbol '{byte_label(byte)}' "
                                        f"from state 'q{current_state}'",
                    'rejection_position': position
                }
            execution_path.append((f"q{current_state}", byte_label(byte), f"q{next_state}"))
            current_state = next_state

        if self.states[current_state].accept:
            return execution_path

        return {
            'accepted': False,
            'path': execution_path,
            'rejection_reason': f"Final state 'q{current_state}' is not an accepting state",
            'rejection_position': len(data)
        }

    def edges(self):
        """Yield every (source, byte, target) triple."""
        for index, state in enumerate(self.states):
            for byte, target in state.defined():
                yield index, byte, target

    def to_dict(self) -> Dict:
        """Convert to the FSA dictionary format."""
        transitions = defaultdict(dict)
        alphabet = set()
        for source, byte, target in self.edges():
            label = byte_label(byte)
            alphabet.add(label)
            transitions[f"q{source}"][label] = [f"q{target}"]

        return {
            'states': [f"q{index}" for index in range(len(self.states))],
            'alphabet': sorted(alphabet),
            'transitions': {f"q{index}": transitions.get(f"q{index}", {}) for index in range(len(self.states))},
            'startingState': 'q0',
            'acceptingStates': [f"q{index}" for index in self.accepting_states]
        }

    def __repr__(self):
        return f"Dfa(states={len(self.states)}, accepting={self.accepting_states})"


def nfa_to_dfa(nfa: Nfa) -> Dfa:
    """
    Converts an NFA to a DFA using the subset construction algorithm.

    Each DFA state stands for the epsilon closure of a set of NFA states. A
    state is accepting if any of its NFA states is. Byte values that lead to
    an empty set are left undefined.

    Args:
        nfa (Nfa): The automaton to determinise; state 0 is its start state

    Returns:
        Dfa: An equivalent DFA whose states are all reachable from state 0
    """
    # Memorisation cache for epsilon closures
    epsilon_closure_cache: Dict[StateSet, StateSet] = {}

    def epsilon_closure(states: StateSet) -> StateSet:
        if states not in epsilon_closure_cache:
            epsilon_closure_cache[states] = nfa.epsilon_closure(states)
        return epsilon_closure_cache[states]

    start_closure = epsilon_closure(StateSet([0]))

    dfa = Dfa()
    dfa_state_map: Dict[StateSet, int] = {start_closure: 0}
    queue: Deque[StateSet] = deque([start_closure])

    while queue:
        subset = queue.popleft()
        current = dfa.new_state(accept=subset.any(lambda state: nfa.states[state].accept))

        # Only bytes some member state can move on can give a non-empty target
        symbols: Set[int] = set()
        for state in subset:
            symbols.update(nfa.states[state].byte_symbols())

        for byte in sorted(symbols):
            target = epsilon_closure(nfa.move(subset, byte))
            if not target:
                continue

            if target not in dfa_state_map:
                dfa_state_map[target] = len(dfa_state_map)
                queue.append(target)

            dfa.states[current].transitions[byte] = dfa_state_map[target]

    logger.debug("Subset construction produced %d DFA states from %d NFA states", len(dfa), len(nfa))
    return dfa


def distinguishable_pairs(dfa: Dfa) -> List[List[bool]]:
    """
    Fill the Myhill-Nerode table of a DFA.

    Returns a symmetric matrix where ``table[i][j]`` is True when some word
    leads exactly one of states i and j to acceptance. A byte defined on one
    side and missing on the other distinguishes the pair.
    """
    states = dfa.states
    size = len(states)
    table = [[False] * size for _ in range(size)]
    defined = [{byte for byte, _ in state.defined()} for state in states]

    for i in range(size):
        for j in range(i + 1, size):
            if states[i].accept != states[j].accept:
                table[i][j] = table[j][i] = True

    def successors_differ(i: int, j: int) -> bool:
        for byte in defined[i] | defined[j]:
            first = states[i].transitions[byte]
            second = states[j].transitions[byte]
            if first is None or second is None:
                return True
            if table[first][second]:
                return True
        return False

    changed = True
    while changed:
        changed = False
        for i in range(size):
            for j in range(i + 1, size):
                if not table[i][j] and successors_differ(i, j):
                    table[i][j] = table[j][i] = True
                    changed = True

    return table


def equivalence_classes(table: List[List[bool]]) -> Tuple[List[int], List[int]]:
    """
    Number the classes of indistinguishable states.

    States are visited in ascending order; each joins the class of the first
    earlier state it cannot be told apart from, otherwise it opens the next class.

    Returns:
        Tuple of (class index per state, representative state per class)
    """
    class_of: List[int] = []
    representatives: List[int] = []

    for i in range(len(table)):
        for j in range(i):
            if not table[i][j]:
                class_of.append(class_of[j])
                break
        else:
            class_of.append(len(representatives))
            representatives.append(i)

    return class_of, representatives


def minimise_dfa(dfa: Dfa) -> Dfa:
    """
    Minimises a DFA in place using the table-filling algorithm.

    All states are assumed reachable from state 0, which ``nfa_to_dfa``
    guarantees. The state list is replaced by one state per class of
    indistinguishable states, in order of each class's lowest member, so the
    initial state stays at index 0.

    Args:
        dfa (Dfa): The DFA to minimise

    Returns:
        Dfa: The same object, for chaining
    """
    if not dfa.states:
        return dfa

    original_size = len(dfa)
    class_of, representatives = equivalence_classes(distinguishable_pairs(dfa))

    dfa.states[:] = [
        DfaState(
            accept=dfa.states[representative].accept,
            transitions=[
                None if target is None else class_of[target]
                for target in dfa.states[representative].transitions
            ]
        )
        for representative in representatives
    ]

    logger.debug("Minimised DFA from %d to %d states", original_size, len(dfa))
    return dfa
