from django.test import TestCase
from regex_monoid.dfa import Dfa, minimise_dfa, nfa_to_dfa
from regex_monoid.exceptions import MonoidLimitExceeded
from regex_monoid.monoid import TransitionPat, build_monoid
from regex_monoid.nfa import build_nfa
from regex_monoid.syntax_tree import parse_regex


def dfa_for(pattern: str, minimise: bool = True) -> Dfa:
    dfa = nfa_to_dfa(build_nfa(parse_regex(pattern)))
    return minimise_dfa(dfa) if minimise else dfa


class TestTransitionPat(TestCase):
    """Test cases for transition patterns and their composition"""

    def test_identity(self):
        self.assertEqual(TransitionPat.identity(2).pat, (0, 1, 2))
        self.assertEqual(TransitionPat.identity(0).pat, (0,))

    def test_multiply_applies_left_operand_first(self):
        f = TransitionPat((1, 0, 2))
        g = TransitionPat((2, 1, 2))

        # (f . g)(i) = g(f(i))
        self.assertEqual(f.multiply(g).pat, (1, 2, 2))
        self.assertEqual(g.multiply(f).pat, (2, 0, 2))

    def test_identity_is_neutral(self):
        f = TransitionPat((1, 0, 2))
        identity = TransitionPat.identity(2)

        self.assertEqual(identity.multiply(f), f)
        self.assertEqual(f.multiply(identity), f)

    def test_generator_sends_missing_transitions_to_dead_state(self):
        dfa = dfa_for('ab', minimise=False)

        self.assertEqual(TransitionPat.generator(dfa, ord('a')).pat, (1, 3, 3, 3))
        self.assertEqual(TransitionPat.generator(dfa, ord('b')).pat, (3, 2, 3, 3))
        self.assertEqual(TransitionPat.generator(dfa, ord('z')).pat, (3, 3, 3, 3))

    def test_dead_state(self):
        pat = TransitionPat.identity(3)
        self.assertEqual(pat.dead, 3)
        self.assertEqual(len(pat), 4)
        self.assertEqual(pat[1], 1)

    def test_patterns_are_hashable_values(self):
        self.assertEqual(hash(TransitionPat((0, 1))), hash(TransitionPat((0, 1))))
        self.assertEqual(len({TransitionPat((0, 1)), TransitionPat((0, 1)), TransitionPat((1, 1))}), 2)


class TestBuildMonoid(TestCase):
    """Test cases for the transition monoid and the aperiodicity test"""

    def test_star_of_union_monoid(self):
        """(a|c)* has only the identity and the zero"""
        monoid = build_monoid(dfa_for('(a|c)*'))

        self.assertEqual(monoid.size, 2)
        self.assertEqual(monoid.elements[0], TransitionPat((0, 1)))
        self.assertEqual(monoid.char_morphism[ord('a')], monoid.identity)
        self.assertEqual(monoid.char_morphism[ord('c')], monoid.identity)
        self.assertEqual(monoid.elements[monoid.char_morphism[ord('b')]], TransitionPat((1, 1)))
        self.assertTrue(monoid.is_aperiodic())

    def test_even_number_of_as_is_not_aperiodic(self):
        monoid = build_monoid(dfa_for('(b|ab*a)*'))

        # identity (reading b), the swap (reading a) and the zero
        self.assertEqual(monoid.size, 3)
        swap = monoid.char_morphism[ord('a')]
        self.assertNotEqual(swap, monoid.identity)
        self.assertEqual(monoid.multiply(swap, swap), monoid.identity)
        self.assertFalse(monoid.is_aperiodic())

    def test_counting_languages_are_not_aperiodic(self):
        for pattern in ['(aa)*', '(aaa)*', '(b|ab*a)*', 'a(aa)*']:
            with self.subTest(pattern=pattern):
                self.assertFalse(build_monoid(dfa_for(pattern)).is_aperiodic())

    def test_star_free_languages_are_aperiodic(self):
        for pattern in ['a', 'ab', 'a|b', 'a*c', '(a|c)*', '(a.*bc|bd)', '(a|b)*abb', 'a*b*']:
            with self.subTest(pattern=pattern):
                self.assertTrue(build_monoid(dfa_for(pattern)).is_aperiodic())

    def test_counting_survives_without_minimisation(self):
        self.assertFalse(build_monoid(dfa_for('(aa)*', minimise=False)).is_aperiodic())

    def test_acyclic_dfa_without_minimisation(self):
        self.assertTrue(build_monoid(dfa_for('ab', minimise=False)).is_aperiodic())

    def test_a_star_c_elements(self):
        dfa = dfa_for('a*c')
        monoid = build_monoid(dfa)

        # identity, a*, c (from the start), and the zero
        self.assertEqual(monoid.size, 4)
        self.assertEqual(
            set(monoid.elements),
            {
                TransitionPat((0, 1, 2)),
                TransitionPat((0, 2, 2)),
                TransitionPat((1, 2, 2)),
                TransitionPat((2, 2, 2)),
            }
        )

    def test_morphism_matches_generators(self):
        dfa = dfa_for('(a.*bc|bd)')
        monoid = build_monoid(dfa)

        for byte in (0, ord('a'), ord('b'), ord('c'), ord('d'), 255):
            with self.subTest(byte=byte):
                self.assertEqual(
                    monoid.elements[monoid.char_morphism[byte]],
                    TransitionPat.generator(dfa, byte)
                )

    def test_multiplication_table_is_composition(self):
        monoid = build_monoid(dfa_for('(a|ba)*'))

        for x in range(monoid.size):
            self.assertEqual(monoid.multiply(monoid.identity, x), x)
            self.assertEqual(monoid.multiply(x, monoid.identity), x)
            for y in range(monoid.size):
                self.assertEqual(
                    monoid.elements[monoid.multiply(x, y)],
                    monoid.elements[x].multiply(monoid.elements[y])
                )

    def test_elements_are_distinct(self):
        monoid = build_monoid(dfa_for('(a.*bc|bd)'))
        self.assertEqual(len(set(monoid.elements)), len(monoid))

    def test_monoid_recognises_the_language(self):
        """A word is accepted iff its element sends the start state to an accepting state"""
        words = ['', 'a', 'b', 'ab', 'ba', 'aa', 'aab', 'aba', 'bab', 'baba', 'abc', 'bd', 'adddbc']

        for pattern in ['(a|ba)*', '(b|ab*a)*', '(a.*bc|bd)', 'a*c']:
            for minimise in (True, False):
                dfa = dfa_for(pattern, minimise=minimise)
                monoid = build_monoid(dfa)
                for word in words:
                    with self.subTest(pattern=pattern, minimise=minimise, word=word):
                        self.assertEqual(monoid.accepts(word), dfa.accepts(word))

    def test_evaluate_and_power(self):
        monoid = build_monoid(dfa_for('(aa)*'))
        a = monoid.char_morphism[ord('a')]

        self.assertEqual(monoid.evaluate(''), monoid.identity)
        self.assertEqual(monoid.evaluate('aa'), monoid.power(a, 2))
        self.assertEqual(monoid.power(a, 2), monoid.identity)
        self.assertEqual(monoid.power(a, 3), a)
        self.assertEqual(monoid.power(a, 0), monoid.identity)

    def test_idempotents(self):
        monoid = build_monoid(dfa_for('(a|c)*'))
        self.assertEqual(monoid.idempotents(), [0, 1])

    def test_element_limit(self):
        with self.assertRaises(MonoidLimitExceeded) as cm:
            build_monoid(dfa_for('a*c'), max_elements=3)
        self.assertEqual(cm.exception.limit, 3)

        # Exactly at the limit is fine
        self.assertEqual(build_monoid(dfa_for('a*c'), max_elements=4).size, 4)

    def test_element_limit_from_settings(self):
        with self.settings(REGEX_MONOID={'MONOID_ELEMENT_LIMIT': 2}):
            with self.assertRaises(MonoidLimitExceeded):
                build_monoid(dfa_for('a*c'))

            # An explicit None lifts the configured limit
            self.assertEqual(build_monoid(dfa_for('a*c'), max_elements=None).size, 4)

    def test_empty_dfa(self):
        monoid = build_monoid(Dfa())

        self.assertEqual(monoid.size, 1)
        self.assertTrue(monoid.is_aperiodic())
        self.assertFalse(monoid.accepts(''))
