"""Manifest builders for K6 test resources and the metrics ServiceMonitor"""

from pathlib import Path
from typing import Any, Dict, List

import yaml

from models.service import (
    RUNNER_IMAGE,
    SCRIPTS_CONFIGMAP,
    SERVICE_CATALOG,
    ServiceTarget,
    get_service,
)
from models.settings import Settings


SERVICE_MONITOR_NAME = "k6-performance-metrics"
PART_OF_LABEL = "conexao-de-sorte-performance"


def k6_test_manifest(service: ServiceTarget, settings: Settings) -> Dict[str, Any]:
    """Build the K6 custom resource that runs one service's load test"""
    return {
        'apiVersion': 'k6.io/v1alpha1',
        'kind': 'K6',
        'metadata': {
            'name': service.test_name,
            'namespace': settings.k6_namespace,
        },
        'spec': {
            'parallelism': service.parallelism,
            'script': {
                'configMap': {
                    'name': SCRIPTS_CONFIGMAP,
                    'file': service.script_file,
                },
            },
            'runner': {
                'image': RUNNER_IMAGE,
                'resources': {
                    'limits': service.limits.as_dict(),
                    'requests': service.requests.as_dict(),
                },
            },
        },
    }


def service_monitor_manifest(settings: Settings) -> Dict[str, Any]:
    """Build the ServiceMonitor that lets Prometheus scrape k6 runners"""
    return {
        'apiVersion': 'monitoring.coreos.com/v1',
        'kind': 'ServiceMonitor',
        'metadata': {
            'name': SERVICE_MONITOR_NAME,
            'namespace': settings.k6_namespace,
            'labels': {
                'app.kubernetes.io/name': 'k6',
                'app.kubernetes.io/part-of': PART_OF_LABEL,
            },
        },
        'spec': {
            'selector': {
                'matchLabels': {
                    'app.kubernetes.io/name': 'k6',
                },
            },
            'endpoints': [
                {
                    'port': 'metrics',
                    'interval': '30s',
                    'path': '/metrics',
                },
            ],
        },
    }


def render(manifest: Dict[str, Any]) -> str:
    """Render a manifest as YAML, keeping key order"""
    return yaml.safe_dump(manifest, sort_keys=False, default_flow_style=False)


def individual_test_path(settings: Settings, service_name: str) -> Path:
    """
    Path of the generated manifest for one service.

    Raises:
        KeyError: If the service is not in the catalog
    """
    service = get_service(service_name)
    return settings.individual_tests_dir / service.manifest_filename


def write_test_manifest(settings: Settings, service: ServiceTarget) -> Path:
    """Write one service's K6 manifest into the individual tests directory"""
    settings.individual_tests_dir.mkdir(parents=True, exist_ok=True)
    path = settings.individual_tests_dir / service.manifest_filename
    path.write_text(render(k6_test_manifest(service, settings)))
    return path


def write_individual_tests(settings: Settings) -> List[Path]:
    """Write manifests for every service in the catalog, overwriting old ones"""
    return [write_test_manifest(settings, service) for service in SERVICE_CATALOG.values()]


def render_test_configuration(settings: Settings) -> str:
    """
    Render k6-performance-tests.yaml for the configured k6 namespace.

    Every document is moved into settings.k6_namespace, including the
    RoleBinding's ServiceAccount subjects and the kubectl commands the
    CronJob runs, so the bundle and the K6 resources always share a namespace.

    Raises:
        OSError: If the file cannot be read
        yaml.YAMLError: If the file is not valid YAML
    """
    namespace = settings.k6_namespace
    documents = []
    for document in yaml.safe_load_all(settings.test_config_file.read_text()):
        if not document:
            continue
        metadata = document.setdefault('metadata', {})
        shipped = metadata.get('namespace')
        metadata['namespace'] = namespace

        if document.get('kind') == 'RoleBinding':
            for subject in document.get('subjects', []):
                if subject.get('kind') == 'ServiceAccount':
                    subject['namespace'] = namespace
        elif document.get('kind') == 'CronJob' and shipped and shipped != namespace:
            for container in _cronjob_containers(document):
                container['command'] = [
                    _retarget(part, shipped, namespace) for part in container.get('command', [])
                ]
        documents.append(document)

    return yaml.safe_dump_all(documents, sort_keys=False, default_flow_style=False)


def _cronjob_containers(cronjob: Dict[str, Any]) -> List[Dict[str, Any]]:
    pod = cronjob.get('spec', {}).get('jobTemplate', {}).get('spec', {}).get('template', {})
    return pod.get('spec', {}).get('containers', [])


def _retarget(command: str, old: str, new: str) -> str:
    # Only the namespace flag and inline manifest keys are rewritten
    return (command
            .replace(f"-n {old} ", f"-n {new} ")
            .replace(f"-n {old}\n", f"-n {new}\n")
            .replace(f"namespace: {old}\n", f"namespace: {new}\n"))
