"""
Render a ResourceGraph as multi-document YAML, one document per resource.

Cluster-scoped objects come first, then namespaced objects grouped by
namespace in build order.
"""

import yaml
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from .datacls import ResourceGraph

logger = logging.getLogger(__name__)


class _ManifestDumper(yaml.SafeDumper):
    pass


def _str_presenter(dumper, data: str):
    # config files read better as literal blocks
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_ManifestDumper.add_representer(str, _str_presenter)


def group_by_namespace(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    cluster_scoped = [d for d in docs if "namespace" not in d.get("metadata", {})]
    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for doc in docs:
        ns = doc.get("metadata", {}).get("namespace")
        if ns is not None:
            grouped.setdefault(ns, []).append(doc)
    ordered = list(cluster_scoped)
    for ns_docs in grouped.values():
        ordered.extend(ns_docs)
    return ordered


def render(graph: ResourceGraph) -> str:
    docs = group_by_namespace(graph.manifests())
    logger.debug(f"Rendering {len(docs)} manifest documents...")
    return yaml.dump_all(docs, Dumper=_ManifestDumper, sort_keys=False, default_flow_style=False)


def write(graph: ResourceGraph, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render(graph), encoding="utf-8")
    logger.info(f"Wrote manifests to '{path}'")
    return path
