"""Kida environment setup.

Creates a kida Environment with querykit's filters and globals bound to
one ``QueryStringHelper``. Host applications that already own an
environment can register ``build_filters``/``build_globals`` themselves.
"""

from collections.abc import Callable
from typing import Any

from kida import Environment

from querykit.helper import QueryStringHelper
from querykit.templating.filters import build_filters, build_globals


def create_environment(
    helper: QueryStringHelper | None = None,
    *,
    autoescape: bool = True,
    filters: dict[str, Callable[..., Any]] | None = None,
    globals_: dict[str, Any] | None = None,
    **options: Any,
) -> Environment:
    """Create a kida Environment wired to *helper*.

    *options* are passed through to ``Environment`` (``loader``, ...).
    User *filters* and *globals_* are registered last and may override
    the built-ins.
    """
    helper = helper or QueryStringHelper()
    env = Environment(autoescape=autoescape, **options)

    # Register querykit's filters (increment_page, field_sorter, etc.)
    env.update_filters(build_filters(helper))

    # Register user-defined filters (may override built-ins)
    if filters:
        env.update_filters(filters)

    for name, value in build_globals(helper).items():
        env.add_global(name, value)

    # Register user-defined globals
    for name, value in (globals_ or {}).items():
        env.add_global(name, value)

    return env


def render_string(env: Environment, source: str, context: dict[str, Any] | None = None) -> str:
    """Render an inline template source to string."""
    template = env.from_string(source)
    return template.render(context or {})
