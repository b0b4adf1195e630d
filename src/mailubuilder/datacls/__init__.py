"""
Mailu Builder Data Classes

- environment: Two-phase shared environment and its write views
- handles: ComponentHandle, the surface a component exposes to its peers
- resources: Immutable resource descriptors and the final ResourceGraph
- contexts: ComponentContext, the inputs of one component builder call
"""

from .environment import SharedEnvironment, EnvironmentWriter, EnvironmentAppender
from .resources import (
    SecretRef,
    EnvVar,
    PortSpec,
    ProbeSpec,
    VolumeSpec,
    StorageDescriptor,
    ConfigBundleDescriptor,
    ServiceDescriptor,
    WorkloadDescriptor,
    ComponentResources,
    ResourceGraph,
)
from .handles import ComponentHandle
from .contexts import ComponentContext

__all__ = [
    'SharedEnvironment',
    'EnvironmentWriter',
    'EnvironmentAppender',
    'SecretRef',
    'EnvVar',
    'PortSpec',
    'ProbeSpec',
    'VolumeSpec',
    'StorageDescriptor',
    'ConfigBundleDescriptor',
    'ServiceDescriptor',
    'WorkloadDescriptor',
    'ComponentResources',
    'ResourceGraph',
    'ComponentHandle',
    'ComponentContext',
]
