"""
Mailu Builder Components

- spec: ComponentSpec, the declarative per-component descriptor, and the extension registry
- catalog: The ten Mailu component specs and their extensions

Importing this package registers every extension.
"""

from .spec import ComponentSpec, ComponentExtras, ProbeDef, EXTENSIONS
from .catalog import CATALOG, get_spec

__all__ = [
    'ComponentSpec',
    'ComponentExtras',
    'ProbeDef',
    'EXTENSIONS',
    'CATALOG',
    'get_spec',
]
