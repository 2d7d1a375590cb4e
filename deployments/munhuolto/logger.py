"""
Structured logging utility for CDK synthesis.

Every synthesis run gets its own correlation ID so that the resolution
decisions, spec counts and invariant failures of one `cdk synth` can be
grouped together in CI logs.

Log format: one JSON document per line on stdout.
"""

import json
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from ulid import ULID


class SynthLogger:
    """
    Structured logger for a single synthesis run.

    Usage:
        logger = create_logger(operation='munhuolto-synth')
        logger.log_environment_resolved(context)
        logger.log_specs_built('MunhuoltoDatabase', specs)
    """

    def __init__(self, correlation_id: str, operation: str):
        self.correlation_id = correlation_id
        self.operation = operation

    def _log(self, event: str, **kwargs: Any) -> None:
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'correlationId': self.correlation_id,
            'operation': self.operation,
            'event': event,
            **kwargs
        }

        print(json.dumps(log_entry, default=str))

    def log_environment_resolved(self, context: Any) -> None:
        """
        Log the resolved environment context.

        Args:
            context: EnvironmentContext produced by resolve_environment()
        """
        self._log(
            'environment_resolved',
            environment=context.name,
            isProduction=context.is_production,
            frontendUrl=context.frontend_url,
            allowSelfSignUp=context.allow_self_sign_up,
        )

    def log_specs_built(self, deployment_id: str, specs: Any) -> None:
        """
        Log how many specs of each kind were built for a deployment.

        Args:
            deployment_id: e.g. 'MunhuoltoDatabase-dev'
            specs: Sequence of spec records
        """
        counts: Dict[str, int] = {}
        for spec in specs:
            counts[spec.kind] = counts.get(spec.kind, 0) + 1

        self._log(
            'specs_built',
            deploymentId=deployment_id,
            total=sum(counts.values()),
            kinds=counts,
        )

    def log_invariant_violation(
        self,
        error_code: str,
        error_message: str,
        **additional_fields: Any
    ) -> None:
        """
        Log a configuration invariant violation.

        Example:
            logger.log_invariant_violation(
                error_code=error.code,
                error_message=error.message,
                errors=error.errors,
            )
        """
        self._log(
            'invariant_violation',
            errorCode=error_code,
            errorMessage=error_message,
            **additional_fields
        )


def create_logger(
    operation: str = 'munhuolto-synth',
    correlation_id: Optional[str] = None
) -> SynthLogger:
    """
    Create a structured logger for one synthesis run.

    A fresh ULID is used as correlation ID unless one is supplied
    (CI can pass its own run ID to tie logs together).
    """
    return SynthLogger(correlation_id or str(ULID()), operation)
