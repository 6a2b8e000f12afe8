"""
Command composer tests.
"""

import pytest

from stackctl.compose import compose_base, compose_command, format_command
from stackctl.modes import Mode, ModeContext

DEV = ModeContext(Mode.DEV, 'docker/compose.development.yaml', 'ecommerce_dev')
BASE = ['docker', 'compose', '-f', 'docker/compose.development.yaml', '-p', 'ecommerce_dev']


class TestComposeCommandShape:
    def test_base_prefix(self):
        assert compose_base(DEV) == BASE

    def test_verb_only(self):
        assert compose_command(DEV, 'ps') == BASE + ['ps']

    def test_empty_service_adds_no_token(self):
        assert compose_command(DEV, 'up', service='') == BASE + ['up']
        assert compose_command(DEV, 'up', service=None) == BASE + ['up']

    def test_full_ordering(self):
        argv = compose_command(
            DEV, 'exec',
            service='backend',
            extra_args=['-u', 'root'],
            default_args=['-T'],
            command=['/bin/sh'],
        )

        assert argv == BASE + ['exec', '-T', '-u', 'root', 'backend', '/bin/sh']

    def test_custom_prefix(self):
        argv = compose_command(DEV, 'ps', compose_prefix=('podman', 'compose'))

        assert argv[:2] == ['podman', 'compose']


class TestComposeCommandOrdering:
    @pytest.mark.parametrize('extra', [
        [],
        ['--build'],
        ['--volumes', '--remove-orphans'],
        ['--timeout', '5'],
    ])
    @pytest.mark.parametrize('service', ['backend', 'gateway', 'mongo'])
    def test_extra_args_precede_service(self, extra, service):
        argv = compose_command(DEV, 'up', service=service, extra_args=extra)

        service_index = argv.index(service)
        for token in extra:
            assert argv.index(token) < service_index
        assert argv[-1] == service

    def test_service_with_spaces_stays_one_token(self):
        argv = compose_command(DEV, 'logs', service='my service; rm -rf /')

        assert argv[-1] == 'my service; rm -rf /'
        assert 'rm' not in argv

    def test_extra_arg_with_metacharacters_stays_one_token(self):
        argv = compose_command(DEV, 'up', extra_args=['$(whoami) && echo'])

        assert '$(whoami) && echo' in argv
        assert len(argv) == len(BASE) + 2


class TestFormatCommand:
    def test_masks_secrets(self):
        text = format_command(['mongosh', '-u', 'root', '-p', 's3cret'], secrets=['root', 's3cret'])

        assert 's3cret' not in text
        assert 'root' not in text
        assert text == 'mongosh -u *** -p ***'

    def test_ignores_empty_secrets(self):
        assert format_command(['a', ''], secrets=['', None]) == 'a '
