"""Help text rendered from the action/alias catalog."""

from __future__ import annotations

from jinja2 import Environment, StrictUndefined

from .actions import ACTIONS, ALIASES, SECTIONS

BOLD = '\033[1m'
CYAN = '\033[36m'
RESET = '\033[0m'

USAGE_TEMPLATE = """\
Usage:
  stackctl {{ cyan }}<action>{{ reset }} [-m dev|prod] [-s SERVICE] [-- EXTRA_ARGS...]
{% for section, entries in sections %}

{{ bold }}{{ section }}{{ reset }}
{% for name, description in entries %}
  {{ cyan }}{{ name.ljust(width) }}{{ reset }} {{ description }}
{% endfor %}
{% endfor %}

Environment: MODE, SERVICE and ARGS provide defaults for -m, -s and extra args.
"""


def catalog_by_section() -> list[tuple[str, list[tuple[str, str]]]]:
    grouped: dict[str, list[tuple[str, str]]] = {section: [] for section in SECTIONS}
    for spec in ACTIONS.values():
        grouped[spec.section].append((spec.name, spec.description))
    for alias in ALIASES.values():
        grouped[alias.section].append((alias.name, alias.description))
    return [(section, entries) for section, entries in grouped.items() if entries]


def render_usage(color: bool = False) -> str:
    env = Environment(
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    template = env.from_string(USAGE_TEMPLATE)
    sections = catalog_by_section()
    width = max(len(name) for _, entries in sections for name, _ in entries) + 2
    return template.render(
        sections=sections,
        width=width,
        bold=BOLD if color else '',
        cyan=CYAN if color else '',
        reset=RESET if color else '',
    )
