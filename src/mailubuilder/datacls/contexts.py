"""
Mailu Builder Component Context

Holds what a component builder may see: the validated configuration, the
sealed shared environment (read-only) and the handles of its declared
prerequisites.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, Optional

from ..config import DeploymentConfig
from ..constants import Role
from .environment import SharedEnvironment
from .handles import ComponentHandle


class ComponentContext(BaseModel):
    """
    Shared, immutable state handed to one component builder invocation.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    config: DeploymentConfig
    environment: SharedEnvironment
    peers: Dict[Role, ComponentHandle] = Field(default_factory=dict)

    def peer(self, role: Role) -> Optional[ComponentHandle]:
        return self.peers.get(role)
