import logging
from typing import Dict, Iterable, List, Optional

from .. import constants
from ..constants import Role
from ..datacls import ComponentHandle, SharedEnvironment

logger = logging.getLogger(__name__)


def find_provider(handles: Iterable[ComponentHandle], role: Role) -> Optional[ComponentHandle]:
    """The first built handle declaring `role`, in build order."""
    for handle in handles:
        if handle.has_role(role):
            return handle
    return None


class ServiceDiscoveryResolver:
    """
    Phase 2: binds well-known shared-environment keys to the FQDNs of the
    components that were actually built.

    A key is written only when some built handle declares the bound role;
    missing producers leave no placeholder behind.

    NOTE: ``FRONT_ADDRESS`` is bound to the *relay* role (postfix), not to the
    front proxy. The Mailu images use it as the submission relay host and the
    relay port is forced to 25, which only postfix answers. Keep this mapping
    unless the consuming images change their convention.
    """
    def __init__(self, handles: Iterable[ComponentHandle]):
        self.handles: List[ComponentHandle] = list(handles)

    def find(self, role: Role) -> Optional[ComponentHandle]:
        return find_provider(self.handles, role)

    def resolve(self) -> Dict[str, str]:
        """Ordered key -> FQDN bindings for every role with a built producer."""
        bindings: Dict[str, str] = {}
        for key, role in constants.DISCOVERY_BINDINGS:
            handle = self.find(role)
            if handle is None:
                logger.debug(f"[Discovery] No component provides '{role.value}'; omitting {key}.")
                continue
            bindings[key] = handle.fqdn
            logger.debug(f"[Discovery] {key} -> {bindings[key]} (from '{handle.name}')")
        return bindings

    def apply(self, env: SharedEnvironment) -> Dict[str, str]:
        """Append the bindings to a sealed shared environment."""
        bindings = self.resolve()
        appender = env.appender()
        for key, value in bindings.items():
            appender.add(key, value)
        logger.info(f"[Discovery] Appended {len(bindings)} service addresses to the shared environment.")
        return bindings
