"""
Declarative description of one Mailu component.

A `ComponentSpec` carries the fixed data that makes a component what it is
(image, port table, default sizing, probe, secrets it reads, roles it
provides and requires). Behavior that data cannot express lives in an
extension function registered in `EXTENSIONS`.
"""

import logging
from pydantic import BaseModel, ConfigDict, Field
from typing import Callable, Dict, Literal, Optional, Tuple, TypeVar, Generic

from ..constants import Component, Role
from ..datacls import (
    ComponentContext,
    ConfigBundleDescriptor,
    EnvVar,
    PortSpec,
    VolumeSpec,
)

logger = logging.getLogger(__name__)

K = TypeVar('K')
V = TypeVar('V')


class ProbeDef(BaseModel):
    """
    Health check shape. Timings not given here fall back to the
    liveness/readiness defaults in `constants`.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["http", "tcp", "exec"]
    port: Optional[int] = None
    path: Optional[str] = None
    command: Tuple[str, ...] = ()
    liveness: Dict[str, int] = Field(default_factory=dict)
    readiness: Dict[str, int] = Field(default_factory=dict)


class ComponentSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    component: Component
    image: str
    # `image` is a full reference rather than a name under the Mailu registry
    external_image: bool = False
    ports: Tuple[PortSpec, ...] = ()
    expose_service: bool = True
    roles: Tuple[Role, ...] = ()
    requires: Tuple[Role, ...] = ()
    default_cpu: str
    default_memory: str
    storage_size: Optional[str] = None
    mount_path: Optional[str] = None
    probe: ProbeDef
    command: Tuple[str, ...] = ()
    static_env: Tuple[EnvVar, ...] = ()
    uses_shared_env: bool = True
    uses_mailu_secret: bool = True
    uses_db_credentials: bool = False

    @property
    def name(self) -> str:
        return self.component.value

    @property
    def has_storage(self) -> bool:
        return self.storage_size is not None


class ComponentExtras(BaseModel):
    """What an extension adds on top of the declarative spec."""
    model_config = ConfigDict(frozen=True)

    env: Tuple[EnvVar, ...] = ()
    config_bundles: Tuple[ConfigBundleDescriptor, ...] = ()
    volumes: Tuple[VolumeSpec, ...] = ()
    node_selector: Dict[str, str] = Field(default_factory=dict)
    tolerations: Tuple[Dict[str, str], ...] = ()


Extension = Callable[[ComponentSpec, ComponentContext], ComponentExtras]


class Registry(Generic[K, V]):
    """
    A simple keyed registry with decorator-style registration.
    """
    def __init__(self, name: str):
        self.name = name
        self._registry: Dict[K, V] = {}

    def register(self, key: K, value: V):
        self._registry[key] = value
        logger.debug(f"Registered in {self.name}: {key} -> {getattr(value, '__name__', str(value))}")

    def get(self, key: K) -> Optional[V]:
        return self._registry.get(key)

    def __call__(self, key: K):
        def decorator(func: V) -> V:
            self.register(key, func)
            return func
        return decorator


EXTENSIONS: Registry[Component, Extension] = Registry("ExtensionRegistry")
