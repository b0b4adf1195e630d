from pydantic import BaseModel, ConfigDict
from typing import Optional, Tuple

from .. import constants
from ..constants import Role
from ..exceptions import BuildError
from .resources import PortSpec


class ComponentHandle(BaseModel):
    """
    The consumption surface one component exposes to the ones built after it.

    Roles are declared by the producing component; consumers look peers up
    by role, never by guessing from the component name.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    namespace: str
    roles: Tuple[Role, ...] = ()
    service_name: Optional[str] = None
    ports: Tuple[PortSpec, ...] = ()
    storage_ref: Optional[str] = None

    @property
    def fqdn(self) -> str:
        if self.service_name is None:
            raise BuildError(f"Component '{self.name}' has no network endpoint.")
        return f"{self.service_name}.{self.namespace}.{constants.CLUSTER_DOMAIN}"

    def has_role(self, role: Role) -> bool:
        return role in self.roles

    def port(self, name: str) -> int:
        for spec in self.ports:
            if spec.name == name:
                return spec.port
        raise BuildError(f"Component '{self.name}' exposes no port named '{name}'.")
