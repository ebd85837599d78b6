from typing import Any

from django.conf import settings

# Default for arguments that fall back to a setting, where None is a meaningful value
FROM_SETTINGS = object()

DEFAULTS = {
    # Minimise the DFA before building the monoid unless the caller says otherwise
    'MINIMISE_BY_DEFAULT': True,
    # None means the monoid closure is unbounded
    'MONOID_ELEMENT_LIMIT': None,
}


def get_setting(name: str) -> Any:
    """
    Look up an application setting from the ``REGEX_MONOID`` dict in Django settings.

    Falls back to the built-in default when the key is missing or when Django
    settings have not been configured, so the algorithm modules can be used
    outside a Django project.

    Raises:
        KeyError: If ``name`` is not a known setting.
    """
    if name not in DEFAULTS:
        raise KeyError(f"Unknown regex_monoid setting '{name}'")

    if not settings.configured:
        return DEFAULTS[name]

    overrides = getattr(settings, 'REGEX_MONOID', {}) or {}
    return overrides.get(name, DEFAULTS[name])
