import json
import logging

from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .conversions import (
    analyse_regex,
    automaton_statistics,
    regex_to_dfa as convert_regex_to_dfa,
    regex_to_nfa as convert_regex_to_nfa,
    validate_regex_syntax,
)
from .dfa import minimise_dfa
from .exceptions import MonoidLimitExceeded
from .export import to_dot

logger = logging.getLogger(__name__)


def _read_regex(request):
    """
    Parse the JSON body and pull out a syntactically valid regex.

    Returns:
        Tuple of (data, regex, error_response); error_response is None on success
    """
    data = json.loads(request.body)
    regex = data.get('regex')

    if regex is None:
        return data, None, JsonResponse({'error': 'Missing regex parameter'}, status=400)
    if not isinstance(regex, str):
        return data, None, JsonResponse({'error': 'Regex must be a string'}, status=400)

    validation_result = validate_regex_syntax(regex)
    if not validation_result['valid']:
        return data, None, JsonResponse({
            'error': f'Invalid regex syntax: {validation_result["error"]}'
        }, status=400)

    return data, regex, None


def _read_minimise(data):
    """
    Read the optional ``minimise`` flag.

    Returns:
        Tuple of (flag, error_response); flag is None when the setting should decide
    """
    minimise = data.get('minimise')
    if minimise is not None and not isinstance(minimise, bool):
        return None, JsonResponse({'error': 'minimise must be true, false or null'}, status=400)
    return minimise, None


def _server_error(e):
    logger.exception("Unexpected error while handling regex request")
    return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def regex_to_nfa(request):
    """
    Django view to handle regex -> ε-NFA conversion requests.

    Expects a POST request with a JSON body containing:
    - regex: The regular expression to convert.

    Returns a JSON response with the Thompson NFA and its statistics.
    """
    try:
        data, regex, error = _read_regex(request)
        if error:
            return error

        nfa = convert_regex_to_nfa(regex)

        return JsonResponse({
            'success': True,
            'regex': regex,
            'epsilon_nfa': nfa.to_dict(),
            'statistics': automaton_statistics(nfa),
            'message': 'Regex converted to ε-NFA successfully'
        })

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        return _server_error(e)


@csrf_exempt
@require_POST
def regex_to_dfa(request):
    """
    Django view to handle regex -> DFA conversion requests.

    Expects a POST request with a JSON body containing:
    - regex: The regular expression to convert
    - minimise (optional): Whether to minimise the DFA; defaults to the
      MINIMISE_BY_DEFAULT setting
    """
    try:
        data, regex, error = _read_regex(request)
        if error:
            return error

        minimise, error = _read_minimise(data)
        if error:
            return error

        dfa = convert_regex_to_dfa(regex, minimise=minimise)

        return JsonResponse({
            'success': True,
            'regex': regex,
            'dfa': dfa.to_dict(),
            'statistics': automaton_statistics(dfa),
            'message': 'Regex converted to DFA successfully'
        })

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        return _server_error(e)


@csrf_exempt
@require_POST
def min_dfa(request):
    """
    Django view to handle DFA minimisation requests.

    Expects a POST request with a JSON body containing:
    - regex: The regular expression whose subset-construction DFA is minimised

    Returns a JSON response with both DFAs and reduction statistics.
    """
    try:
        data, regex, error = _read_regex(request)
        if error:
            return error

        dfa = convert_regex_to_dfa(regex, minimise=False)
        original_fsa = dfa.to_dict()
        original_stats = automaton_statistics(dfa)

        minimise_dfa(dfa)
        minimised_stats = automaton_statistics(dfa)

        # Calculate reduction statistics
        reduction_stats = {
            'states_reduced': original_stats['states_count'] - minimised_stats['states_count'],
            'states_reduction_percentage': round(
                ((original_stats['states_count'] - minimised_stats['states_count']) /
                 original_stats['states_count']) * 100, 2
            ),
            'transitions_reduced': original_stats['transitions_count'] - minimised_stats['transitions_count'],
            'is_already_minimal': original_stats['states_count'] == minimised_stats['states_count']
        }

        return JsonResponse({
            'success': True,
            'regex': regex,
            'original_fsa': original_fsa,
            'minimised_fsa': dfa.to_dict(),
            'statistics': {
                'original': original_stats,
                'minimised': minimised_stats,
                'reduction': reduction_stats
            },
            'message': 'DFA minimised successfully' if not reduction_stats['is_already_minimal']
                      else 'DFA was already minimal'
        })

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        return _server_error(e)


@csrf_exempt
@require_POST
def check_aperiodic(request):
    """
    Django view deciding whether a regex describes a star-free language.

    Expects a POST request with a JSON body containing:
    - regex: The regular expression to analyse
    - minimise (optional): Whether to build the monoid of the minimal DFA

    Returns a JSON response with the monoid size and the aperiodicity verdict.
    """
    try:
        data, regex, error = _read_regex(request)
        if error:
            return error

        minimise, error = _read_minimise(data)
        if error:
            return error

        analysis = analyse_regex(regex, minimise=minimise)
        monoid = analysis.monoid

        return JsonResponse({
            'success': True,
            'regex': regex,
            'is_aperiodic': analysis.is_aperiodic,
            'minimised': analysis.minimised,
            'dfa_states_count': len(analysis.dfa),
            'monoid_size': monoid.size,
            'idempotents_count': len(monoid.idempotents()),
            'message': 'Language is star-free' if analysis.is_aperiodic
                      else 'Language is not star-free: its monoid contains a nontrivial group'
        })

    except MonoidLimitExceeded as e:
        return JsonResponse({'error': str(e)}, status=422)
    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        return _server_error(e)


@csrf_exempt
@require_POST
def simulate_regex(request):
    """
    Django view to run an input string through the DFA of a regex.

    Expects a POST request with a JSON body containing:
    - regex: The regular expression
    - input: The input string to simulate
    """
    try:
        data, regex, error = _read_regex(request)
        if error:
            return error

        input_string = data.get('input', '')
        if not isinstance(input_string, str):
            return JsonResponse({'error': 'Input must be a string'}, status=400)

        result = convert_regex_to_dfa(regex).simulate(input_string)

        if isinstance(result, list):
            # Input was accepted - result is the execution path
            return JsonResponse({
                'accepted': True,
                'path': result
            })

        return JsonResponse({
            'accepted': False,
            'path': result.get('path', []),
            'rejection_reason': result.get('rejection_reason', 'Unknown rejection reason'),
            'rejection_position': result.get('rejection_position', 0)
        })

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        return _server_error(e)


@csrf_exempt
@require_POST
def export_dot(request):
    """
    Django view returning the DOT description of a regex's automaton.

    Expects a POST request with a JSON body containing:
    - regex: The regular expression
    - automaton (optional): 'nfa' or 'dfa' (default 'dfa')
    - minimise (optional): Whether to minimise the DFA
    """
    try:
        data, regex, error = _read_regex(request)
        if error:
            return error

        minimise, error = _read_minimise(data)
        if error:
            return error

        kind = data.get('automaton', 'dfa')
        if kind == 'nfa':
            automaton = convert_regex_to_nfa(regex)
        elif kind == 'dfa':
            automaton = convert_regex_to_dfa(regex, minimise=minimise)
        else:
            return JsonResponse({'error': f"Unknown automaton type '{kind}'"}, status=400)

        return HttpResponse(to_dot(automaton), content_type='text/vnd.graphviz; charset=utf-8')

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        return _server_error(e)
