"""
Unit tests for the synthesis logger.
"""

import json
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'deployments'))

from munhuolto.environment import resolve_environment
from munhuolto.logger import create_logger
from munhuolto.table_specs import build_table_specs


def _entries(capsys):
    return [json.loads(line) for line in capsys.readouterr().out.splitlines() if line]


class TestSynthLogger:
    """Test structured log entries."""

    def test_environment_resolved(self, capsys):
        logger = create_logger(correlation_id='run-1')
        logger.log_environment_resolved(resolve_environment(environment='prod', env={}))

        (entry,) = _entries(capsys)
        assert entry['event'] == 'environment_resolved'
        assert entry['correlationId'] == 'run-1'
        assert entry['environment'] == 'prod'
        assert entry['isProduction'] is True
        assert entry['allowSelfSignUp'] is False
        assert entry['timestamp'].endswith('Z')

    def test_specs_built_counts_kinds(self, capsys):
        logger = create_logger(correlation_id='run-2')
        logger.log_specs_built('MunhuoltoDatabase-dev', build_table_specs(resolve_environment(env={})))

        (entry,) = _entries(capsys)
        assert entry['event'] == 'specs_built'
        assert entry['deploymentId'] == 'MunhuoltoDatabase-dev'
        assert entry['total'] == 5
        assert entry['kinds'] == {'Table': 5}

    def test_invariant_violation_carries_errors(self, capsys):
        logger = create_logger(correlation_id='run-3')
        errors = [{'field': 'UserGroup.precedence', 'message': 'Same precedence as AdminGroup'}]
        logger.log_invariant_violation(
            error_code='CONFIGURATION_INVARIANT_VIOLATION',
            error_message='1 configuration invariant(s) violated',
            errors=errors,
        )

        (entry,) = _entries(capsys)
        assert entry['event'] == 'invariant_violation'
        assert entry['errorCode'] == 'CONFIGURATION_INVARIANT_VIOLATION'
        assert entry['errors'] == errors

    def test_generated_correlation_id(self):
        first = create_logger()
        second = create_logger()
        assert first.correlation_id
        assert first.correlation_id != second.correlation_id
