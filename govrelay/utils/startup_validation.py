"""
Startup validation utilities to check configuration before serving requests.

Checks the settings the relay cannot work without (oracle node, Ethereum
endpoint, reply webhook, API token) and warns about risky defaults.
"""

import os
import sys
from typing import List

from govrelay.config import common_settings as settings
from govrelay.utils.logger import logger

REQUIRED_ENV_VARS = [
    "GOVRELAY_TOKEN",
    "WITNET_NODE_URL",
    "ETHEREUM_RPC_URL",
    "CHAT_REPLY_WEBHOOK_URL",
]


def missing_required_vars() -> List[str]:
    return [var for var in REQUIRED_ENV_VARS if not os.environ.get(var)]


class StartupValidator:
    """Startup validation for the governance relay."""

    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate_all(self) -> bool:
        """
        Run all validation checks.

        Returns:
            True if all critical checks pass, False otherwise.
        """
        logger.info("StartupValidator: Beginning system validation")

        # Critical validations (must pass)
        self._validate_environment_variables()
        self._validate_oracle_config()

        # Non-critical validations (warnings only)
        self._validate_chain_config()
        self._validate_orchestrator_config()

        self._report_results()

        return len(self.errors) == 0

    def _validate_environment_variables(self) -> None:
        missing_vars = missing_required_vars()
        if missing_vars:
            self.errors.append(f"Missing required environment variables: {', '.join(missing_vars)}")
        else:
            logger.info("StartupValidator: Environment variables validation passed")

    def _validate_oracle_config(self) -> None:
        if not settings.REACTION_MONITOR_URLS:
            self.errors.append("REACTION_MONITOR_URLS must list at least one reaction monitor")
        for template in settings.REACTION_MONITOR_URLS:
            if "{message_id}" not in template:
                self.errors.append(f"Reaction monitor URL is missing the {{message_id}} placeholder: {template}")
        if settings.ORACLE_POLL_INTERVAL_SECONDS <= 0:
            self.errors.append("ORACLE_POLL_INTERVAL_SECONDS must be positive")
        if settings.ORACLE_WITNESSES < 1:
            self.errors.append("ORACLE_WITNESSES must be at least 1")

    def _validate_chain_config(self) -> None:
        if not settings.RELAYER_PRIVATE_KEY:
            self.warnings.append(
                "RELAYER_PRIVATE_KEY not set: transactions will be sent from the node's first unlocked account"
            )

    def _validate_orchestrator_config(self) -> None:
        if settings.MAX_TIMER_DELAY_SECONDS <= 0:
            self.errors.append("MAX_TIMER_DELAY_SECONDS must be positive")
        if settings.EXECUTION_GRACE_SECONDS < 0:
            self.errors.append("EXECUTION_GRACE_SECONDS cannot be negative")

    def _report_results(self) -> None:
        """Report validation results."""
        if self.errors:
            logger.error("StartupValidator: %d critical errors found:", len(self.errors))
            for error in self.errors:
                logger.error("  - %s", error)

        if self.warnings:
            logger.warning("StartupValidator: %d warnings found:", len(self.warnings))
            for warning in self.warnings:
                logger.warning("  - %s", warning)

        if not self.errors and not self.warnings:
            logger.info("StartupValidator: All validation checks passed successfully")
        elif not self.errors:
            logger.info("StartupValidator: Critical validation passed with %d warnings", len(self.warnings))


def validate_startup() -> bool:
    """
    Run startup validation and return success status.

    Returns:
        True if validation passes, False if critical errors found.
    """
    validator = StartupValidator()
    return validator.validate_all()


def validate_or_exit() -> None:
    """Run startup validation and exit if critical errors are found."""
    if not validate_startup():
        logger.error("StartupValidator: Critical validation errors found. Exiting.")
        sys.exit(1)

    logger.info("StartupValidator: System validation completed successfully")


if __name__ == "__main__":
    # Allow running validation as a standalone script
    validate_or_exit()
