import logging
from typing import Dict, List, Optional, Union

from .. import constants
from ..constants import Component, Role
from ..components import get_spec
from ..config import Config, DeploymentConfig
from ..datacls import (
    ComponentContext,
    ComponentHandle,
    ComponentResources,
    ResourceGraph,
    SharedEnvironment,
)
from ..exceptions import DependencyError
from ..validators import validate_config
from .component import ComponentBuilder
from .discovery import ServiceDiscoveryResolver, find_provider
from .environment import SharedEnvironmentBuilder
from .ingress import IngressComposer

logger = logging.getLogger(__name__)


class Builder:
    """
    Compiles a deployment configuration into a `ResourceGraph`.

    The build order is static: core components, then enabled optional
    components, then dependent components, then the discovery patch and
    finally ingress. Any error aborts the whole run; nothing partial is
    returned.
    """

    def __init__(self, config: Union[Config, DeploymentConfig]):
        self.config: DeploymentConfig = config.model if isinstance(config, Config) else config
        self.environment: Optional[SharedEnvironment] = None
        self.handles: Dict[Component, ComponentHandle] = {}
        logger.debug(f"Builder initialized for namespace '{self.config.namespace}'.")

    def plan(self) -> List[Component]:
        """The ordered list of components this configuration builds."""
        toggles = self.config.components
        order = [c for c in constants.CORE_COMPONENTS if toggles.is_enabled(c)]
        order += [c for c in constants.OPTIONAL_COMPONENTS if toggles.is_enabled(c)]
        order += [dep for dep, gate in constants.DEPENDENT_COMPONENTS.items() if toggles.is_enabled(gate)]
        return order

    def run(self) -> ResourceGraph:
        """Orchestrates the entire build process step by step."""
        cfg = self.config
        logger.info(f"[Builder] Starting build for '{cfg.domain}' in namespace '{cfg.namespace}'...")
        self.handles = {}

        logger.debug("[Builder] Validating configuration...")
        validate_config(cfg)

        logger.debug("[Builder] Building phase-1 shared environment...")
        env = SharedEnvironmentBuilder(cfg).build()
        env.seal()

        resources: List[ComponentResources] = []
        for component in self.plan():
            resources.append(self._build_component(component, env))

        logger.debug("[Builder] Resolving service discovery...")
        ServiceDiscoveryResolver(self.handles.values()).apply(env)

        ingress = []
        if cfg.ingress.enabled:
            logger.debug("[Builder] Composing ingress...")
            composer = IngressComposer(cfg)
            ingress = composer.compose(front=self._provider(Role.FRONT), relay=self._provider(Role.RELAY))

        self.environment = env
        graph = ResourceGraph(
            namespace=cfg.namespace,
            environment=env.as_dict(),
            components=tuple(resources),
            ingress=tuple(ingress),
        )
        logger.info(f"[Builder] Build finished: {len(resources)} components, {len(ingress)} ingress resources.")
        return graph

    def _build_component(self, component: Component, env: SharedEnvironment) -> ComponentResources:
        spec = get_spec(component)
        peers: Dict[Role, ComponentHandle] = {}
        for role in spec.requires:
            provider = self._provider(role)
            if provider is None:
                raise DependencyError(requester=spec.name, missing=role.value)
            peers[role] = provider

        ctx = ComponentContext(config=self.config, environment=env, peers=peers)
        res, handle = ComponentBuilder(spec).build(ctx)
        self.handles[component] = handle
        logger.info(f"[Builder] Built component '{spec.name}'.")
        return res

    def _provider(self, role: Role) -> Optional[ComponentHandle]:
        return find_provider(self.handles.values(), role)
