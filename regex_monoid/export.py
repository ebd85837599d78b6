import logging
import os
from typing import Union as TypingUnion

import graphviz

from .dfa import Dfa
from .nfa import Nfa, Symbol, byte_label

logger = logging.getLogger(__name__)

Automaton = TypingUnion[Nfa, Dfa]


def edge_label(symbol: Symbol) -> str:
    """Edge label as DOT source text: backslashes are doubled so they render literally."""
    return byte_label(symbol).replace('\\', '\\\\')


def to_digraph(automaton: Automaton) -> graphviz.Digraph:
    """
    Describe an NFA or DFA as a left-to-right directed graph.

    A plaintext pseudo-node ``empty`` points at ``s0`` with a "start" edge,
    accepting states are double circles, and every (state, symbol, target)
    triple becomes one labelled edge.
    """
    dot = graphviz.Digraph(name='G')
    dot.attr(rankdir='LR')
    dot.node('empty', label='', shape='plaintext')

    for index, state in enumerate(automaton.states):
        dot.node(f"s{index}", shape='doublecircle' if state.accept else 'circle')

    dot.edge('empty', 's0', label='start')
    for source, symbol, target in automaton.edges():
        dot.edge(f"s{source}", f"s{target}", label=edge_label(symbol))

    return dot


def to_dot(automaton: Automaton) -> str:
    return to_digraph(automaton).source


def write_dot(automaton: Automaton, path: TypingUnion[str, os.PathLike]) -> str:
    """
    Save the DOT description of ``automaton`` to ``path``.

    Raises:
        OSError: If the file cannot be written. The automaton is left untouched.
    """
    filepath = to_digraph(automaton).save(filename=os.fspath(path))
    logger.info("Wrote %d-state automaton to %s", len(automaton.states), filepath)
    return filepath
