"""Installer settings resolved from defaults, environment and CLI flags"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

from lib.errors import ConfigurationError


# Directory holding k6-performance-tests.yaml and individual-tests/
PACKAGE_DIR = Path(__file__).resolve().parent.parent

DEFAULTS: Dict[str, str] = {
    'K6_OPERATOR_VERSION': 'v0.0.14',
    'K6_NAMESPACE': 'k6-system',
    'TARGET_NAMESPACE': 'default',
    'K6_VALIDATION_WAIT': '60',
    'KUBECTL': 'kubectl',
    'K6_BASE_DIR': str(PACKAGE_DIR),
}

OPERATOR_BUNDLE_URL = "https://github.com/grafana/k6-operator/releases/download/{version}/bundle.yaml"
OPERATOR_NAMESPACE = "k6-operator-system"
OPERATOR_DEPLOYMENT = "k6-operator-controller-manager"
OPERATOR_WAIT_TIMEOUT = "300s"
CONFIGMAP_WAIT_TIMEOUT = "60s"

PROMETHEUS_DEPLOYMENT = "prometheus"
PROMETHEUS_NAMESPACE = "istio-system"

TEST_CONFIG_FILENAME = "k6-performance-tests.yaml"
INDIVIDUAL_TESTS_DIRNAME = "individual-tests"


@dataclass(frozen=True)
class Settings:
    """
    Everything the installer needs to know about where and what to install.

    Built once by from_env() and passed to every step.
    """
    operator_version: str
    k6_namespace: str
    target_namespace: str
    validation_wait: int
    kubectl: str
    base_dir: Path
    debug: bool = False

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, **overrides) -> 'Settings':
        """
        Resolve settings from DEFAULTS, environment variables and overrides.

        Overrides with a value of None are ignored so argparse results can be
        passed straight through.

        Raises:
            ConfigurationError: The validation wait is not a non-negative integer
        """
        source = os.environ if env is None else env
        values = {key: source.get(key, default) for key, default in DEFAULTS.items()}

        try:
            wait = int(values['K6_VALIDATION_WAIT'])
        except ValueError:
            raise ConfigurationError(
                f"K6_VALIDATION_WAIT must be an integer, got '{values['K6_VALIDATION_WAIT']}'"
            )

        settings = cls(
            operator_version=values['K6_OPERATOR_VERSION'],
            k6_namespace=values['K6_NAMESPACE'],
            target_namespace=values['TARGET_NAMESPACE'],
            validation_wait=wait,
            kubectl=values['KUBECTL'],
            base_dir=Path(values['K6_BASE_DIR']).expanduser().resolve(),
        )

        applied = {k: v for k, v in overrides.items() if v is not None}
        if 'base_dir' in applied:
            applied['base_dir'] = Path(applied['base_dir']).expanduser().resolve()
        if applied:
            settings = replace(settings, **applied)

        if settings.validation_wait < 0:
            raise ConfigurationError(
                f"Validation wait must be zero or more seconds, got {settings.validation_wait}"
            )
        return settings

    @property
    def operator_bundle_url(self) -> str:
        return OPERATOR_BUNDLE_URL.format(version=self.operator_version)

    @property
    def test_config_file(self) -> Path:
        return self.base_dir / TEST_CONFIG_FILENAME

    @property
    def individual_tests_dir(self) -> Path:
        return self.base_dir / INDIVIDUAL_TESTS_DIRNAME
