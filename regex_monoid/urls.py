from django.urls import path
from . import views

urlpatterns = [
    # Regex compilation
    path('api/regex-to-nfa/', views.regex_to_nfa, name='regex_to_nfa'),
    path('api/regex-to-dfa/', views.regex_to_dfa, name='regex_to_dfa'),

    # DFA transformation
    path('api/minimise-dfa/', views.min_dfa, name='minimise_dfa'),

    # Algebraic analysis
    path('api/check-aperiodic/', views.check_aperiodic, name='check_aperiodic'),

    # Simulation and visualisation
    path('api/simulate-regex/', views.simulate_regex, name='simulate_regex'),
    path('api/export-dot/', views.export_dot, name='export_dot'),
]
