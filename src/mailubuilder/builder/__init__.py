"""
Mailu Builder Builder Module

- Builder: Orchestrates the whole compilation
- SharedEnvironmentBuilder: Phase-1 shared environment
- ComponentBuilder: Generic per-component builder driven by a ComponentSpec
- ServiceDiscoveryResolver: Phase-2 service addresses
- IngressComposer: Traefik routing resources

Usage:
    from mailubuilder import Builder, Config

    config = Config("mailu.yml")
    graph = Builder(config).run()
"""

from .build import Builder
from .environment import SharedEnvironmentBuilder
from .component import ComponentBuilder
from .discovery import ServiceDiscoveryResolver
from .ingress import IngressComposer

__all__ = [
    'Builder',
    'SharedEnvironmentBuilder',
    'ComponentBuilder',
    'ServiceDiscoveryResolver',
    'IngressComposer',
]
