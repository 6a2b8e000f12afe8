"""
Action dispatcher and alias layer tests.
"""

import logging

import pytest

from stackctl.actions import (
    ACTIONS,
    ALIASES,
    build_action_command,
    catalog_names,
    mongo_shell_command,
    resolve_invocation,
)
from stackctl.errors import ConfigurationError, UnknownActionError
from stackctl.modes import resolve_mode

from conftest import make_settings

DEV_BASE = ['docker', 'compose', '-f', 'docker/compose.development.yaml', '-p', 'ecommerce_dev']
PROD_BASE = ['docker', 'compose', '-f', 'docker/compose.production.yaml', '-p', 'ecommerce_prod']


def _command(settings, name, **overrides):
    invocation = resolve_invocation(name, **overrides)
    context = resolve_mode(invocation.mode, settings)
    return build_action_command(invocation, context, settings)


class TestCatalog:
    def test_core_actions_present(self):
        for name in ('up', 'down', 'build', 'logs', 'restart', 'shell', 'ps',
                     'backup', 'reset', 'health', 'help'):
            assert name in ACTIONS

    def test_alias_targets_exist(self):
        for alias in ALIASES.values():
            if alias.name == 'mongo-shell':
                continue
            assert alias.action in ACTIONS, alias.name

    def test_names_are_unique(self):
        names = catalog_names()
        assert len(names) == len(set(names))
        assert not set(ACTIONS) & set(ALIASES)


class TestVerbActions:
    @pytest.mark.parametrize('name', ['down', 'build', 'restart', 'ps'])
    def test_verb_is_action_name(self, settings, name):
        assert _command(settings, name) == DEV_BASE + [name]

    def test_up_is_detached(self, settings):
        assert _command(settings, 'up') == DEV_BASE + ['up', '-d']

    def test_up_with_extra_args_and_service(self, settings):
        argv = _command(settings, 'up', mode='prod', service='backend', extra_args=['--build'])

        assert argv == PROD_BASE + ['up', '-d', '--build', 'backend']

    def test_logs_follow_by_default(self, settings):
        assert _command(settings, 'logs', service='gateway') == DEV_BASE + ['logs', '-f', 'gateway']

    def test_down_passes_volumes_flag(self, settings):
        argv = _command(settings, 'down', mode='prod', extra_args=['--volumes'])

        assert argv == PROD_BASE + ['down', '--volumes']

    def test_clean_removes_orphans(self, settings):
        assert _command(settings, 'clean') == DEV_BASE + ['down', '--remove-orphans']

    def test_clean_ignores_service_variable(self, settings):
        invocation = resolve_invocation('clean', env_service='backend')

        assert invocation.service is None
        assert _command(settings, 'clean', env_service='backend') == DEV_BASE + ['down', '--remove-orphans']

    def test_clean_ignores_service_flag_with_warning(self, settings, caplog):
        with caplog.at_level(logging.WARNING, logger='stackctl.actions'):
            argv = _command(settings, 'clean', mode='prod', service='gateway')

        assert argv == PROD_BASE + ['down', '--remove-orphans']
        assert 'ignoring --service gateway' in caplog.text


class TestShell:
    def test_defaults_to_backend(self, settings):
        assert _command(settings, 'shell') == DEV_BASE + ['exec', 'backend', '/bin/sh']

    def test_explicit_service(self, settings):
        assert _command(settings, 'shell', service='gateway') == DEV_BASE + ['exec', 'gateway', '/bin/sh']

    def test_env_service_counts_as_caller_supplied(self):
        invocation = resolve_invocation('shell', env_service='mongo')

        assert invocation.service == 'mongo'

    def test_other_actions_have_no_default_service(self):
        for name in ('up', 'down', 'build', 'logs', 'restart', 'ps'):
            assert resolve_invocation(name).service is None


class TestAliases:
    def test_dev_shell_defaults_to_backend(self):
        invocation = resolve_invocation('dev-shell')

        assert invocation.service == 'backend'
        assert invocation.mode == 'dev'
        assert invocation.spec.name == 'shell'

    def test_dev_shell_explicit_service_wins(self):
        assert resolve_invocation('dev-shell', service='gateway').service == 'gateway'

    def test_alias_service_beats_environment(self):
        assert resolve_invocation('gateway-shell', env_service='backend').service == 'gateway'

    def test_alias_mode_beats_environment(self):
        assert resolve_invocation('prod-up', env_mode='dev').mode == 'prod'

    def test_explicit_mode_wins_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger='stackctl.actions'):
            invocation = resolve_invocation('dev-up', mode='prod')

        assert invocation.mode == 'prod'
        assert "bound to mode 'dev'" in caplog.text

    def test_matching_explicit_mode_does_not_warn(self, caplog):
        with caplog.at_level(logging.WARNING, logger='stackctl.actions'):
            resolve_invocation('dev-up', mode='dev')

        assert caplog.text == ''

    def test_modeless_alias_uses_environment(self):
        assert resolve_invocation('backend-shell', env_mode='prod').mode == 'prod'

    def test_extra_args_pass_through_alias(self, settings):
        argv = _command(settings, 'prod-up', extra_args=['--build'])

        assert argv == PROD_BASE + ['up', '-d', '--build']

    @pytest.mark.parametrize('alias, target', [
        ('status', 'ps'), ('db-backup', 'backup'), ('db-reset', 'reset'),
    ])
    def test_plain_aliases(self, alias, target):
        assert resolve_invocation(alias).spec is ACTIONS[target]

    def test_unknown_name(self):
        with pytest.raises(UnknownActionError, match="Unknown action 'deploy'"):
            resolve_invocation('deploy')


class TestMongoShell:
    def test_command_injects_credentials(self, settings):
        context = resolve_mode('dev', settings)

        argv = mongo_shell_command(context, settings)

        assert argv == DEV_BASE + ['exec', 'mongo', 'mongosh', '-u', 'root', '-p', 's3cret']

    def test_alias_uses_native_handler(self):
        invocation = resolve_invocation('mongo-shell')

        assert invocation.spec.handler == 'mongo-shell'
        assert invocation.spec.verb is None

    def test_missing_credentials(self, tmp_path):
        settings = make_settings(tmp_path, db_password=None)
        context = resolve_mode('dev', settings)

        with pytest.raises(ConfigurationError, match='MONGO_INITDB_ROOT_PASSWORD'):
            mongo_shell_command(context, settings)
