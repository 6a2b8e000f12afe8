"""
Help renderer tests.
"""

import re

from stackctl.actions import ACTIONS, ALIASES, SECTIONS
from stackctl.usage import render_usage

ENTRY = re.compile(r'^  (\S+)\s{2,}\S')


def _listed_names(text):
    return [m.group(1) for m in map(ENTRY.match, text.splitlines()) if m]


class TestRenderUsage:
    def test_lists_every_name_exactly_once(self):
        names = _listed_names(render_usage())

        assert sorted(names) == sorted([*ACTIONS, *ALIASES])
        assert len(names) == len(set(names))

    def test_section_headers_present(self):
        text = render_usage()

        for section in SECTIONS:
            assert f'\n{section}\n' in text

    def test_columns_aligned(self):
        lines = [line for line in render_usage().splitlines() if ENTRY.match(line)]
        starts = {len(line) - len(line[2:].split(None, 1)[1]) for line in lines}

        assert len(starts) == 1

    def test_plain_output_has_no_escape_codes(self):
        assert '\033[' not in render_usage(color=False)

    def test_color_output(self):
        text = render_usage(color=True)

        assert '\033[36m' in text
        assert '\033[1m' in text

    def test_descriptions_rendered(self):
        text = render_usage()

        assert ACTIONS['up'].description in text
        assert ALIASES['dev-shell'].description in text
