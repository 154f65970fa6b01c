"""
K6 Performance Testing Installer

Installs the k6-operator and drives load tests against the
conexao-de-sorte backend services:
- Prerequisite checks (kubectl, cluster access, target deployments, Prometheus)
- Operator installation from the upstream release bundle
- Test configuration (scripts ConfigMap and daily CronJob)
- Per-service K6 manifests under individual-tests/
- ServiceMonitor for Prometheus scraping
- A single validation run against the gateway
"""

import shutil
import time
from pathlib import Path
from typing import List, Optional

import yaml

from lib.errors import ConfigurationError, PrerequisiteError, UnknownServiceError
from lib.kubectl import Kubectl, duration_seconds
from models.service import (
    SCRIPTS_CONFIGMAP,
    SERVICE_CATALOG,
    VALIDATION_SERVICE,
    ServiceTarget,
    service_names,
)
from models.settings import (
    CONFIGMAP_WAIT_TIMEOUT,
    INDIVIDUAL_TESTS_DIRNAME,
    OPERATOR_DEPLOYMENT,
    OPERATOR_NAMESPACE,
    OPERATOR_WAIT_TIMEOUT,
    PROMETHEUS_DEPLOYMENT,
    PROMETHEUS_NAMESPACE,
    Settings,
)
from utils import manifests
from utils.console import Colors


STAGE_FINISHED = "finished"
STAGE_ERROR = "error"


class PerformanceTestingInstaller:
    """Runs the installer steps against the current kubectl context"""

    def __init__(self, settings: Settings, kubectl: Optional[Kubectl] = None):
        self.settings = settings
        self.kubectl = kubectl or Kubectl(settings.kubectl, debug=settings.debug)

    def prometheus_available(self) -> bool:
        return self.kubectl.resource_exists('deployment', PROMETHEUS_DEPLOYMENT, PROMETHEUS_NAMESPACE)

    def check_prerequisites(self):
        """
        Verify kubectl and cluster access, then report on target services.

        Raises:
            PrerequisiteError: kubectl is missing or the cluster is unreachable
        """
        Colors.header("Checking prerequisites for Performance Testing...")

        if not self.kubectl.available():
            raise PrerequisiteError(f"{self.settings.kubectl} not found. Install kubectl first.")

        if not self.kubectl.cluster_reachable():
            raise PrerequisiteError("Could not connect to the Kubernetes cluster.")

        Colors.step("Checking target microservices...")
        for service in SERVICE_CATALOG.values():
            if self.kubectl.resource_exists('deployment', service.deployment,
                                            self.settings.target_namespace):
                Colors.success(f"Service {service.deployment} found")
            else:
                Colors.warning(f"Service {service.deployment} not found - tests may fail")

        if self.prometheus_available():
            Colors.success("Prometheus found for metrics collection")
        else:
            Colors.warning("Prometheus not found - metrics limited")

        Colors.success("Prerequisites verified")

    def install_operator(self):
        Colors.header("Installing K6 Operator...")

        Colors.step(f"Creating namespace {self.settings.k6_namespace}...")
        self.kubectl.ensure_namespace(self.settings.k6_namespace)

        Colors.step(f"Installing K6 Operator {self.settings.operator_version}...")
        self.kubectl.apply_file(self.settings.operator_bundle_url)

        Colors.step("Waiting for K6 Operator...")
        if not self.kubectl.wait(f"deployment/{OPERATOR_DEPLOYMENT}", 'condition=available',
                                 OPERATOR_NAMESPACE, OPERATOR_WAIT_TIMEOUT):
            Colors.warning("K6 Operator not reported available yet - continuing")

        Colors.success("K6 Operator installed successfully")

    def configure_performance_tests(self):
        Colors.header("Configuring performance tests...")

        Colors.step("Applying test configuration...")
        self.kubectl.apply_manifest(self._test_configuration())

        # ConfigMaps carry no conditions, so confirm by reading it back
        Colors.step("Waiting for ConfigMaps to be created...")
        if not self._configmap_present():
            Colors.warning(f"ConfigMap {SCRIPTS_CONFIGMAP} not found in "
                           f"{self.settings.k6_namespace} - tests may fail")

        Colors.success("Test configuration applied")

    def _test_configuration(self) -> str:
        path = self.settings.test_config_file
        if not path.exists():
            raise ConfigurationError(f"Test configuration not found: {path}")
        try:
            return manifests.render_test_configuration(self.settings)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid test configuration {path}: {e}")

    def _configmap_present(self) -> bool:
        deadline = time.monotonic() + duration_seconds(CONFIGMAP_WAIT_TIMEOUT)
        while True:
            if self.kubectl.resource_exists('configmap', SCRIPTS_CONFIGMAP, self.settings.k6_namespace):
                return True
            if time.monotonic() >= deadline:
                return False
            time.sleep(2)

    def create_individual_tests(self) -> List[Path]:
        Colors.header("Creating individual test files...")
        paths = manifests.write_individual_tests(self.settings)
        if self.settings.debug:
            for path in paths:
                print(f"  {path}")
        Colors.success(f"Individual test files created in {INDIVIDUAL_TESTS_DIRNAME}/")
        return paths

    def configure_monitoring(self) -> bool:
        """
        Apply the k6 ServiceMonitor when Prometheus is running.

        Returns:
            True if the ServiceMonitor was applied
        """
        Colors.header("Configuring performance monitoring...")

        if not self.prometheus_available():
            Colors.warning("Prometheus not found - monitoring limited")
            return False

        Colors.step("Configuring Prometheus integration...")
        manifest = manifests.render(manifests.service_monitor_manifest(self.settings))
        self.kubectl.apply_manifest(manifest)
        Colors.success("Monitoring configured with Prometheus")
        return True

    def _manifest_for(self, service: ServiceTarget) -> Path:
        path = manifests.individual_test_path(self.settings, service.name)
        if not path.exists():
            Colors.step(f"Generating {INDIVIDUAL_TESTS_DIRNAME}/{path.name}...")
            path = manifests.write_test_manifest(self.settings, service)
        return path

    def run_validation_test(self) -> str:
        """
        Run the gateway test once and report its stage after a fixed wait.

        The K6 resource is deleted afterwards whatever the outcome.

        Returns:
            The .status.stage value read from the cluster ("" if unreadable)
        """
        Colors.header("Running validation test...")
        service = SERVICE_CATALOG[VALIDATION_SERVICE]

        Colors.step("Running validation test on Gateway...")
        self.kubectl.apply_file(self._manifest_for(service))

        try:
            Colors.step("Waiting for the test to finish...")
            time.sleep(self.settings.validation_wait)

            stage = self.kubectl.get_jsonpath('k6', service.test_name,
                                              self.settings.k6_namespace, '{.status.stage}')

            if stage == STAGE_FINISHED:
                Colors.success("Validation test completed successfully")
            elif stage == STAGE_ERROR:
                Colors.warning("Validation test failed - check logs")
            else:
                Colors.warning(f"Test still running or status undetermined: {stage}")
        finally:
            self.kubectl.delete('k6', service.test_name, self.settings.k6_namespace)

        return stage

    def run_service_test(self, name: str) -> Path:
        """
        Apply one service's K6 manifest.

        Raises:
            UnknownServiceError: The service is not in the catalog
        """
        service = SERVICE_CATALOG.get(name)
        if service is None:
            raise UnknownServiceError(
                f"Unknown service '{name}'. Available services: {', '.join(service_names())}"
            )

        Colors.info(f"Running test for {name}...")
        path = self._manifest_for(service)
        self.kubectl.apply_file(path)
        return path

    def uninstall(self):
        Colors.warning("Uninstalling K6 Performance Testing...")
        if self.settings.test_config_file.exists():
            self.kubectl.delete_manifest(self._test_configuration())
        else:
            Colors.warning(f"{self.settings.test_config_file} not found - "
                           "skipping test configuration")
        self.kubectl.delete_file(self.settings.operator_bundle_url)
        self.kubectl.delete_namespace(self.settings.k6_namespace)
        shutil.rmtree(self.settings.individual_tests_dir, ignore_errors=True)
        Colors.success("K6 Performance Testing uninstalled")

    def show_post_install_info(self):
        ns = self.settings.k6_namespace
        Colors.header("Performance Testing post-install information")

        print()
        print("📊 K6 Performance Testing installed successfully!")
        print()
        print("🔧 Commands to run tests:")
        for service in SERVICE_CATALOG.values():
            print(f"  • Test {service.name}: kubectl apply -f "
                  f"{INDIVIDUAL_TESTS_DIRNAME}/{service.manifest_filename}")
        print()
        print("📊 Test monitoring:")
        print(f"  • List tests: kubectl get k6 -n {ns}")
        print(f"  • Test status: kubectl describe k6 <test-name> -n {ns}")
        print(f"  • Test logs: kubectl logs -f job/<test-name> -n {ns}")
        print()
        print("⏰ Automated tests:")
        print("  • CronJob configured for daily execution at 02:00")
        print(f"  • Check: kubectl get cronjob -n {ns}")
        print()
        print("📈 Available metrics:")
        print("  • http_req_duration: Request response time")
        print("  • http_req_failed: Request failure rate")
        print("  • k6_test_duration: Total test duration")
        print()
        print("📋 Next steps:")
        print("  1. Run individual tests for validation")
        print("  2. Configure alerts based on the metrics")
        print("  3. Adjust thresholds as needed")
        print("  4. Integrate with the CI/CD pipeline")
        print()
        print("⚠️ Important:")
        print("  • Load tests can impact performance")
        print("  • Run during low-traffic hours")
        print("  • Monitor cluster resources during tests")
        print()

    def install(self):
        """Full installation: every step in order"""
        self.check_prerequisites()
        self.install_operator()
        self.configure_performance_tests()
        self.create_individual_tests()
        self.configure_monitoring()
        self.run_validation_test()
        self.show_post_install_info()
