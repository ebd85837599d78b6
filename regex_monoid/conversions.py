import logging
from typing import Any, Dict, NamedTuple, Optional, Union as TypingUnion

from .conf import FROM_SETTINGS, get_setting
from .dfa import Dfa, minimise_dfa, nfa_to_dfa
from .exceptions import RegexSyntaxError
from .monoid import Monoid, build_monoid
from .nfa import EPSILON, Nfa, build_nfa
from .syntax_tree import Node, parse_regex

logger = logging.getLogger(__name__)

Pattern = TypingUnion[str, bytes]


class Analysis(NamedTuple):
    """Every stage of the pipeline for one regex"""
    regex: Pattern
    tree: Node
    nfa: Nfa
    dfa: Dfa
    minimised: bool
    monoid: Monoid
    is_aperiodic: bool


def _resolve_minimise(minimise: Optional[bool]) -> bool:
    return get_setting('MINIMISE_BY_DEFAULT') if minimise is None else minimise


def regex_to_nfa(regex: Pattern) -> Nfa:
    """Parse ``regex`` and compile it with Thompson's construction."""
    return build_nfa(parse_regex(regex))


def regex_to_dfa(regex: Pattern, minimise: Optional[bool] = None) -> Dfa:
    """
    Convert a regular expression to a DFA.

    Args:
        regex: The pattern, as text or bytes
        minimise: Whether to minimise the result; defaults to the
            MINIMISE_BY_DEFAULT setting

    Returns:
        Dfa: The (optionally minimised) subset-construction DFA
    """
    dfa = nfa_to_dfa(regex_to_nfa(regex))
    if _resolve_minimise(minimise):
        minimise_dfa(dfa)
    return dfa


def analyse_regex(regex: Pattern, minimise: Optional[bool] = None,
                  max_elements: Optional[int] = FROM_SETTINGS) -> Analysis:
    """
    Run the whole pipeline: syntax tree, NFA, DFA, optional minimisation,
    transition monoid and the aperiodicity verdict.

    Examples:
        analyse_regex("(a|c)*").is_aperiodic     # True, star-free
        analyse_regex("(b|ab*a)*").is_aperiodic  # False, counts a's modulo 2
    """
    minimise = _resolve_minimise(minimise)

    tree = parse_regex(regex)
    nfa = build_nfa(tree)
    dfa = nfa_to_dfa(nfa)
    if minimise:
        minimise_dfa(dfa)
    monoid = build_monoid(dfa, max_elements=max_elements)
    is_aperiodic = monoid.is_aperiodic()

    logger.info(
        "Analysed %r: %d NFA states, %d DFA states, monoid of size %d, aperiodic=%s",
        regex, len(nfa), len(dfa), monoid.size, is_aperiodic
    )
    return Analysis(regex, tree, nfa, dfa, minimise, monoid, is_aperiodic)


def automaton_statistics(automaton: TypingUnion[Nfa, Dfa]) -> Dict[str, Any]:
    """Summary counts used by the views and the management command."""
    edges = list(automaton.edges())
    stats = {
        'states_count': len(automaton.states),
        'alphabet_size': len({symbol for _, symbol, _ in edges if symbol is not EPSILON}),
        'transitions_count': len(edges),
        'accepting_states_count': len(automaton.accepting_states)
    }
    if isinstance(automaton, Nfa):
        stats['epsilon_transitions_count'] = sum(1 for _, symbol, _ in edges if symbol is EPSILON)
    return stats


def validate_regex_syntax(regex: Pattern) -> Dict[str, Any]:
    """
    Validate regex syntax without building any automaton.

    Returns:
        Dict with 'valid' (bool) and optional 'error' (str) keys
    """
    try:
        parse_regex(regex)
        return {'valid': True}
    except RegexSyntaxError as e:
        return {'valid': False, 'error': str(e)}
