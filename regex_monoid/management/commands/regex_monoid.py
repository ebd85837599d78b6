from django.core.management.base import BaseCommand, CommandError

from ...conversions import analyse_regex, automaton_statistics
from ...exceptions import RegexMonoidError
from ...export import write_dot


class Command(BaseCommand):
    help = (
        "Compile a regular expression to an NFA and DFA, build the transition "
        "monoid and report whether the language is star-free."
    )

    def add_arguments(self, parser):
        parser.add_argument('regex', help="Pattern using literals, '.', '|', '*' and parentheses")
        parser.add_argument('--output', '-o', help="Write the automaton as a DOT file to this path")
        parser.add_argument('--automaton', choices=['nfa', 'dfa'], default='dfa',
                            help="Automaton written by --output (default: dfa)")
        parser.add_argument('--no-minimise', action='store_true',
                            help="Analyse the subset-construction DFA without minimising it")
        parser.add_argument('--test', action='append', default=[], metavar='WORD',
                            help="Report whether WORD is accepted; may be repeated")

    def handle(self, *args, **options):
        minimise = False if options['no_minimise'] else None

        try:
            analysis = analyse_regex(options['regex'], minimise=minimise)
        except RegexMonoidError as e:
            raise CommandError(str(e))

        nfa_stats = automaton_statistics(analysis.nfa)
        dfa_stats = automaton_statistics(analysis.dfa)
        self.stdout.write(f"NFA states: {nfa_stats['states_count']}")
        self.stdout.write(
            f"DFA states: {dfa_stats['states_count']}"
            f"{' (minimised)' if analysis.minimised else ''}"
        )
        self.stdout.write(f"Monoid size: {analysis.monoid.size}")
        self.stdout.write(f"Aperiodic: {'yes' if analysis.is_aperiodic else 'no'}")

        for word in options['test']:
            verdict = 'accepted' if analysis.dfa.accepts(word) else 'rejected'
            self.stdout.write(f"{word!r}: {verdict}")

        if options['output']:
            automaton = analysis.nfa if options['automaton'] == 'nfa' else analysis.dfa
            try:
                write_dot(automaton, options['output'])
            except OSError as e:
                raise CommandError(f"Could not write {options['output']}: {e}")
            self.stdout.write(self.style.SUCCESS(f"Wrote {options['automaton'].upper()} to {options['output']}"))
