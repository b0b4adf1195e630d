import logging
from typing import Dict, List, Optional, Tuple
from pydantic.alias_generators import to_camel

from .. import constants
from ..components import ComponentSpec, ComponentExtras, EXTENSIONS
from ..config import DeploymentConfig
from ..datacls import (
    ComponentContext,
    ComponentHandle,
    ComponentResources,
    EnvVar,
    ProbeSpec,
    SecretRef,
    ServiceDescriptor,
    StorageDescriptor,
    VolumeSpec,
    WorkloadDescriptor,
)
from ..exceptions import DependencyError
from ..utils import quantities, check_size
from ..utils.resources import size_to_mebibytes, cpu_to_millicores

logger = logging.getLogger(__name__)


class ComponentBuilder:
    """
    Turns one `ComponentSpec` into its resources and the handle later
    builders may consume.

    Sizing rules:
        - requests: per-component override merged onto the built-in default
        - limits: only what is explicitly configured
        - storage size: component size, else the built-in default size
        - storage class: component class, else the global class, else unset
    """
    def __init__(self, spec: ComponentSpec):
        self.spec = spec
        self.name = spec.name
        self.resource_name = f"{constants.RESOURCE_PREFIX}-{spec.name}"

    def build(self, ctx: ComponentContext) -> Tuple[ComponentResources, ComponentHandle]:
        logger.debug(f"[{self.name}] Building component...")
        self.check_peers(ctx)
        cfg = ctx.config

        extension = EXTENSIONS.get(self.spec.component)
        extras = extension(self.spec, ctx) if extension else ComponentExtras()

        requests, limits = self._sizing(cfg)
        storage = self._storage(cfg)

        volumes: List[VolumeSpec] = []
        if storage is not None:
            volumes.append(VolumeSpec(name="data", mount_path=self.spec.mount_path, claim_name=storage.name))
        volumes.extend(extras.volumes)

        selector = {constants.LABEL_NAME: self.resource_name, constants.LABEL_COMPONENT: self.name}
        labels = dict(selector)
        labels[constants.LABEL_PART_OF] = constants.RESOURCE_PREFIX

        liveness, readiness = self._probes()
        workload = WorkloadDescriptor(
            name=self.resource_name,
            namespace=cfg.namespace,
            container=self.name,
            image=self._image(cfg),
            pull_policy=cfg.images.pull_policy,
            ports=self.spec.ports,
            env=tuple(self._env(cfg)) + extras.env,
            env_from=(constants.SHARED_ENV_NAME,) if self.spec.uses_shared_env else (),
            requests=requests,
            limits=limits,
            liveness=liveness,
            readiness=readiness,
            command=self.spec.command,
            volumes=tuple(volumes),
            node_selector=extras.node_selector,
            tolerations=extras.tolerations,
            labels=labels,
            selector=selector,
        )

        service = None
        if self.spec.expose_service:
            service = ServiceDescriptor(
                name=self.resource_name,
                namespace=cfg.namespace,
                ports=self.spec.ports,
                selector=selector,
                labels=labels,
            )

        resources = ComponentResources(
            component=self.name,
            workload=workload,
            storage=storage,
            service=service,
            config_bundles=extras.config_bundles,
        )
        handle = ComponentHandle(
            name=self.name,
            namespace=cfg.namespace,
            roles=self.spec.roles,
            service_name=service.name if service else None,
            ports=self.spec.ports if service else (),
            storage_ref=storage.name if storage else None,
        )
        logger.debug(f"[{self.name}] Built with roles {[r.value for r in handle.roles]}.")
        return resources, handle

    def check_peers(self, ctx: ComponentContext):
        """Every required role must be provided by an already built peer."""
        for role in self.spec.requires:
            if ctx.peer(role) is None:
                raise DependencyError(requester=self.name, missing=role.value)

    def _image(self, cfg: DeploymentConfig) -> str:
        if self.spec.external_image:
            return self.spec.image
        return f"{cfg.images.registry}/{self.spec.image}:{cfg.images.tag}"

    def _sizing(self, cfg: DeploymentConfig) -> Tuple[Dict[str, str], Dict[str, str]]:
        sizing = cfg.resources.for_component(self.spec.component)
        field = f"resources.{to_camel(self.name.replace('-', '_'))}"
        defaults = {"cpu": self.spec.default_cpu, "memory": self.spec.default_memory}
        requests = {**defaults, **quantities(sizing.requests.cpu, sizing.requests.memory, f"{field}.requests")}
        limits = quantities(sizing.limits.cpu, sizing.limits.memory, f"{field}.limits")
        self._warn_limit_below_request(requests, limits)
        return requests, limits

    def _warn_limit_below_request(self, requests: Dict[str, str], limits: Dict[str, str]):
        if "cpu" in limits and cpu_to_millicores(limits["cpu"]) < cpu_to_millicores(requests["cpu"]):
            logger.warning(f"[{self.name}] CPU limit {limits['cpu']} is below the request {requests['cpu']}.")
        if "memory" in limits and size_to_mebibytes(limits["memory"]) < size_to_mebibytes(requests["memory"]):
            logger.warning(f"[{self.name}] Memory limit {limits['memory']} is below the request {requests['memory']}.")

    def _storage(self, cfg: DeploymentConfig) -> Optional[StorageDescriptor]:
        if not self.spec.has_storage:
            return None
        override = cfg.storage.for_component(self.spec.component)
        size = check_size(override.size or self.spec.storage_size, f"storage.{self.name}.size")
        storage_class = override.storage_class or cfg.storage.storage_class
        return StorageDescriptor(
            name=f"{self.resource_name}-data",
            namespace=cfg.namespace,
            size=size,
            storage_class=storage_class,
            labels={
                constants.LABEL_NAME: self.resource_name,
                constants.LABEL_COMPONENT: self.name,
                constants.LABEL_PART_OF: constants.RESOURCE_PREFIX,
            },
        )

    def _env(self, cfg: DeploymentConfig) -> List[EnvVar]:
        env: List[EnvVar] = []
        if self.spec.uses_mailu_secret:
            env.append(EnvVar(
                name="SECRET_KEY",
                secret=SecretRef(name=cfg.secrets.mailu_secret_key, key=constants.SECRET_KEY_MAILU),
            ))
        if self.spec.uses_db_credentials and cfg.database.type == "postgresql":
            pg = cfg.database.postgresql
            env.append(EnvVar(name="DB_USER", secret=SecretRef(name=pg.secret_name, key=pg.secret_keys.username)))
            env.append(EnvVar(name="DB_PW", secret=SecretRef(name=pg.secret_name, key=pg.secret_keys.password)))
        env.extend(self.spec.static_env)
        return env

    def _probes(self) -> Tuple[ProbeSpec, ProbeSpec]:
        probe = self.spec.probe
        shape = {"kind": probe.kind, "port": probe.port, "path": probe.path, "command": probe.command}
        liveness = ProbeSpec(**shape, **{**constants.LIVENESS_DEFAULTS, **probe.liveness})
        readiness = ProbeSpec(**shape, **{**constants.READINESS_DEFAULTS, **probe.readiness})
        return liveness, readiness
