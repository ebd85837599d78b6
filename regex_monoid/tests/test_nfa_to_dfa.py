from django.test import TestCase
from regex_monoid.dfa import Dfa, nfa_to_dfa
from regex_monoid.nfa import build_nfa
from regex_monoid.syntax_tree import parse_regex


def dfa_for(pattern: str) -> Dfa:
    return nfa_to_dfa(build_nfa(parse_regex(pattern)))


class TestNfaToDfa(TestCase):
    """Test cases for subset construction"""

    def test_single_literal(self):
        """Regex 'a' accepts exactly 'a'"""
        dfa = dfa_for('a')

        self.assertEqual(len(dfa), 2)
        self.assertTrue(dfa.accepts('a'))
        self.assertFalse(dfa.accepts(''))
        self.assertFalse(dfa.accepts('aa'))

    def test_union(self):
        dfa = dfa_for('a|b')

        self.assertTrue(dfa.accepts('a'))
        self.assertTrue(dfa.accepts('b'))
        self.assertFalse(dfa.accepts('c'))
        self.assertFalse(dfa.accepts('ab'))
        # Separate accepting states for each arm until minimisation
        self.assertEqual(len(dfa), 3)

    def test_star_then_literal(self):
        dfa = dfa_for('a*c')

        for word in ['c', 'ac', 'aaaaac']:
            self.assertTrue(dfa.accepts(word), f"Expected '{word}' to be accepted")
        for word in ['a', '', 'acc', 'ca']:
            self.assertFalse(dfa.accepts(word), f"Expected '{word}' to be rejected")

    def test_wildcard_inside_union(self):
        dfa = dfa_for('(a.*bc|bd)')

        for word in ['bd', 'abc', 'adddbc', 'a\x00\xffbc']:
            self.assertTrue(dfa.accepts(word), f"Expected {word!r} to be accepted")
        for word in ['ab', 'bc', 'bdx', '']:
            self.assertFalse(dfa.accepts(word), f"Expected {word!r} to be rejected")

    def test_star_of_union(self):
        dfa = dfa_for('(a|c)*')

        for word in ['', 'a', 'c', 'accaac']:
            self.assertTrue(dfa.accepts(word))
        for word in ['b', 'ab', 'acb']:
            self.assertFalse(dfa.accepts(word))

    def test_concatenation(self):
        dfa = dfa_for('ab')
        self.assertTrue(dfa.accepts('ab'))
        self.assertFalse(dfa.accepts('a'))
        self.assertFalse(dfa.accepts('abb'))

    def test_bytes_input(self):
        dfa = dfa_for('.a')
        self.assertTrue(dfa.accepts(b'\x80a'))
        self.assertFalse(dfa.accepts(b'\x80'))

    def test_agrees_with_nfa(self):
        """Test that the DFA and the NFA accept the same strings"""
        patterns = ['a', 'a|b', 'a*c', '(a.*bc|bd)', '(a|c)*', '(a|ba)*', '(b|ab*a)*', 'a(b|c)*d']
        words = ['', 'a', 'b', 'c', 'd', 'ab', 'ba', 'ac', 'bd', 'abc', 'aba', 'abad', 'bab', 'aab', 'acbd']

        for pattern in patterns:
            nfa = build_nfa(parse_regex(pattern))
            dfa = nfa_to_dfa(nfa)
            for word in words:
                with self.subTest(pattern=pattern, word=word):
                    self.assertEqual(nfa.accepts(word), dfa.accepts(word))

    def test_state_zero_is_initial(self):
        dfa = dfa_for('(a|c)*')
        # The start closure already contains the accept state
        self.assertTrue(dfa.states[0].accept)
        self.assertEqual(dfa.run(''), 0)

    def test_missing_transition_rejects(self):
        dfa = dfa_for('a')
        self.assertIsNone(dfa.states[0].transitions[ord('b')])
        self.assertIsNone(dfa.run('b'))

    def test_all_states_reachable(self):
        dfa = dfa_for('(a.*bc|bd)')
        reached = {0}
        frontier = [0]
        while frontier:
            state = frontier.pop()
            for _, target in dfa.states[state].defined():
                if target not in reached:
                    reached.add(target)
                    frontier.append(target)
        self.assertEqual(reached, set(range(len(dfa))))

    def test_construction_is_deterministic(self):
        first = dfa_for('(a.*bc|bd)').to_dict()
        second = dfa_for('(a.*bc|bd)').to_dict()
        self.assertEqual(first, second)


class TestDfaSimulation(TestCase):
    """Test cases for DFA simulation paths and the FSA dictionary format"""

    def setUp(self):
        self.dfa = dfa_for('ab')

    def test_accepted_path(self):
        self.assertEqual(
            self.dfa.simulate('ab'),
            [('q0', 'a', 'q1'), ('q1', 'b', 'q2')]
        )

    def test_rejected_on_missing_transition(self):
        result = self.dfa.simulate('ac')

        self.assertIsInstance(result, dict)
        self.assertFalse(result['accepted'])
        self.assertEqual(result['path'], [('q0', 'a', 'q1')])
        self.assertEqual(result['rejection_position'], 1)
        self.assertIn("No transition defined for symbol 'c'", result['rejection_reason'])

    def test_rejected_in_non_accepting_state(self):
        result = self.dfa.simulate('a')

        self.assertFalse(result['accepted'])
        self.assertEqual(result['rejection_position'], 1)
        self.assertEqual(result['rejection_reason'], "Final state 'q1' is not an accepting state")

    def test_to_dict(self):
        fsa = self.dfa.to_dict()

        self.assertEqual(fsa['states'], ['q0', 'q1', 'q2'])
        self.assertEqual(fsa['alphabet'], ['a', 'b'])
        self.assertEqual(fsa['transitions'], {
            'q0': {'a': ['q1']},
            'q1': {'b': ['q2']},
            'q2': {}
        })
        self.assertEqual(fsa['startingState'], 'q0')
        self.assertEqual(fsa['acceptingStates'], ['q2'])

    def test_copy_is_independent(self):
        copy = self.dfa.copy()
        copy.states[0].transitions[ord('a')] = None

        self.assertTrue(self.dfa.accepts('ab'))
        self.assertFalse(copy.accepts('ab'))
