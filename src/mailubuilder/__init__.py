"""
Mailu Builder

Compiles one declarative Mailu deployment description into the Kubernetes
resources of a complete mail stack.

Main modules:
- config: Configuration loading and validation
- validators: Domain and CIDR checks run before any resource is built
- builder: Orchestrator, shared environment, component builder, discovery, ingress
- components: Declarative specs of the ten Mailu components
- datacls: Shared environment, handles and immutable resource descriptors
- emit: YAML rendering of the resource graph
- utils: Utility functions

Quick start example:
```python
from mailubuilder import Builder, Config, emit

config = Config("mailu.yml")
graph = Builder(config).run()
print(emit.render(graph))
```
"""

__version__ = "0.3.0"

from .config import Config, DeploymentConfig
from .validators import validate_config
from .builder import Builder
from .datacls import ResourceGraph, SharedEnvironment, ComponentHandle
from . import emit
from .exceptions import (
    MailuBuilderError,
    ConfigurationError,
    ConfigValidationError,
    DefinitionError,
    DependencyError,
    CompositionPreconditionError,
    BuildError,
    UnsupportedFeatureError,
)

__all__ = [
    # Version
    '__version__',
    # Config
    'Config',
    'DeploymentConfig',
    'validate_config',
    # Builder
    'Builder',
    'ResourceGraph',
    'SharedEnvironment',
    'ComponentHandle',
    'emit',
    # Exceptions
    'MailuBuilderError',
    'ConfigurationError',
    'ConfigValidationError',
    'DefinitionError',
    'DependencyError',
    'CompositionPreconditionError',
    'BuildError',
    'UnsupportedFeatureError',
]
