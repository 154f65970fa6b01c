"""
Pytest configuration and fixtures for the performance testing installer.

This file provides pytest fixtures that are automatically available
to all test modules. No test talks to a real cluster: subprocess.run is
replaced by a recorder that answers kubectl invocations from canned rules.
"""

import subprocess
from pathlib import Path
from types import SimpleNamespace
from typing import List, Optional, Tuple

import pytest

from lib import installer as installer_module
from lib import kubectl as kubectl_module
from lib.installer import PerformanceTestingInstaller
from lib.kubectl import Kubectl
from models.settings import Settings


MINIMAL_CONFIGURATION = """\
apiVersion: v1
kind: ConfigMap
metadata:
  name: conexao-de-sorte-k6-scripts
  namespace: k6-system
data:
  gateway-load-test.js: |
    export default function () {}
"""


class FakeKubectl:
    """
    Records kubectl invocations and replies from registered rules.

    A rule matches when its tokens are a prefix of the arguments after the
    binary. The most recently registered matching rule wins; unmatched
    commands succeed with empty output.
    """

    def __init__(self):
        self.calls: List[List[str]] = []
        self.inputs: List[Optional[str]] = []
        self._rules: List[Tuple[List[str], object]] = []

    def respond(self, prefix: List[str], returncode: int = 0, stdout: str = "", stderr: str = ""):
        self._rules.append((prefix, (returncode, stdout, stderr)))

    def raise_on(self, prefix: List[str], exc: Exception):
        self._rules.append((prefix, exc))

    def __call__(self, cmd, input=None, capture_output=False, text=False, timeout=None, **kwargs):
        self.calls.append(list(cmd))
        self.inputs.append(input)
        args = list(cmd[1:])
        for prefix, outcome in reversed(self._rules):
            if args[:len(prefix)] == prefix:
                if isinstance(outcome, Exception):
                    raise outcome
                returncode, stdout, stderr = outcome
                return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)
        return subprocess.CompletedProcess(cmd, 0, "", "")

    def args_list(self) -> List[List[str]]:
        """Recorded calls without the binary"""
        return [c[1:] for c in self.calls]

    def find(self, prefix: List[str]) -> List[List[str]]:
        return [a for a in self.args_list() if a[:len(prefix)] == prefix]


class FakeClock:
    """Stand-in for the time module: sleep advances monotonic instantly"""

    def __init__(self):
        self.now = 0.0
        self.sleeps: List[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_kubectl(monkeypatch) -> FakeKubectl:
    """Replace subprocess.run for kubectl and pretend the binary is installed"""
    fake = FakeKubectl()
    monkeypatch.setattr(kubectl_module.subprocess, "run", fake)
    monkeypatch.setattr(kubectl_module.shutil, "which", lambda name: f"/usr/local/bin/{name}")
    return fake


@pytest.fixture
def clock(monkeypatch) -> FakeClock:
    fake = FakeClock()
    monkeypatch.setattr(installer_module, "time",
                        SimpleNamespace(sleep=fake.sleep, monotonic=fake.monotonic))
    return fake


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    """Working directory with a minimal k6-performance-tests.yaml"""
    (tmp_path / "k6-performance-tests.yaml").write_text(MINIMAL_CONFIGURATION)
    return tmp_path


@pytest.fixture
def settings(base_dir: Path) -> Settings:
    return Settings.from_env(env={}, base_dir=base_dir, validation_wait=5)


@pytest.fixture
def installer(settings: Settings, fake_kubectl: FakeKubectl, clock: FakeClock) -> PerformanceTestingInstaller:
    return PerformanceTestingInstaller(settings, Kubectl(settings.kubectl))


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "kubectl: kubectl command runner tests"
    )
    config.addinivalue_line(
        "markers", "manifests: K6 and ServiceMonitor manifest tests"
    )
    config.addinivalue_line(
        "markers", "installer: Installer step tests (prerequisites, operator, validation)"
    )
    config.addinivalue_line(
        "markers", "cli: Command line dispatch and exit code tests"
    )
