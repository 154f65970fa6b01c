"""Target service catalog for k6 load tests"""

from dataclasses import dataclass
from typing import Dict, List


RUNNER_IMAGE = "grafana/k6:latest"
SCRIPTS_CONFIGMAP = "conexao-de-sorte-k6-scripts"
DEPLOYMENT_PREFIX = "conexao-de-sorte-backend-"

# Service used by the validation run and by `test` when no service is given
VALIDATION_SERVICE = "gateway"


@dataclass(frozen=True)
class ResourceSpec:
    """CPU/memory pair as written into a container resources block"""
    cpu: str
    memory: str

    def as_dict(self) -> Dict[str, str]:
        return {'cpu': self.cpu, 'memory': self.memory}


@dataclass(frozen=True)
class ServiceTarget:
    """
    A backend service that has a dedicated k6 test.

    The short name keys the catalog and the generated file names
    (k6-test-<name>.yaml, <name>-load-test.js).
    """
    name: str
    parallelism: int
    limits: ResourceSpec
    requests: ResourceSpec
    description: str

    @property
    def deployment(self) -> str:
        """Deployment name of the service in the target namespace"""
        return f"{DEPLOYMENT_PREFIX}{self.name}"

    @property
    def test_name(self) -> str:
        """Name of the K6 custom resource for this service"""
        return f"{self.deployment}-test"

    @property
    def script_file(self) -> str:
        """Key of the service's script inside the scripts ConfigMap"""
        return f"{self.name}-load-test.js"

    @property
    def manifest_filename(self) -> str:
        return f"k6-test-{self.name}.yaml"


SERVICE_CATALOG: Dict[str, ServiceTarget] = {
    'autenticacao': ServiceTarget(
        name='autenticacao',
        parallelism=4,
        limits=ResourceSpec(cpu='500m', memory='512Mi'),
        requests=ResourceSpec(cpu='200m', memory='256Mi'),
        description='Load test for authentication',
    ),
    'gateway': ServiceTarget(
        name='gateway',
        parallelism=6,
        limits=ResourceSpec(cpu='1000m', memory='1Gi'),
        requests=ResourceSpec(cpu='300m', memory='512Mi'),
        description='Load test for gateway',
    ),
    'financeiro': ServiceTarget(
        name='financeiro',
        parallelism=2,
        limits=ResourceSpec(cpu='300m', memory='256Mi'),
        requests=ResourceSpec(cpu='100m', memory='128Mi'),
        description='Conservative test for financial',
    ),
}


def get_service(name: str) -> ServiceTarget:
    """
    Look up a service by short name.

    Raises:
        KeyError: If the name is not in the catalog
    """
    return SERVICE_CATALOG[name]


def service_names() -> List[str]:
    return list(SERVICE_CATALOG.keys())
