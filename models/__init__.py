"""Data models for the performance testing installer"""

from .service import ServiceTarget, ResourceSpec, SERVICE_CATALOG, get_service, service_names
from .settings import Settings

__all__ = ['ServiceTarget', 'ResourceSpec', 'SERVICE_CATALOG', 'get_service', 'service_names', 'Settings']
