from django.apps import AppConfig


class RegexMonoidConfig(AppConfig):
    name = 'regex_monoid'
    verbose_name = 'Regex automata and syntactic monoids'
