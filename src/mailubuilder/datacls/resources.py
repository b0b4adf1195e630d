"""
Mailu Builder Resource Descriptors

Immutable descriptions of the Kubernetes objects produced for one component.
Each descriptor renders itself into a plain manifest dict with `to_manifest()`;
serialization is left to `mailubuilder.emit`.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, Optional, Tuple, Any, List, Literal

from .. import constants


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


def _metadata(name: str, namespace: str, labels: Dict[str, str]) -> Dict[str, Any]:
    metadata: Dict[str, Any] = {"name": name, "namespace": namespace}
    if labels:
        metadata["labels"] = dict(labels)
    return metadata


class SecretRef(_Frozen):
    """A secret is referenced by name and key only; its value never enters a descriptor."""
    name: str
    key: str

    def to_manifest(self) -> Dict[str, Any]:
        return {"secretKeyRef": {"name": self.name, "key": self.key}}


class EnvVar(_Frozen):
    name: str
    value: Optional[str] = None
    secret: Optional[SecretRef] = None

    def to_manifest(self) -> Dict[str, Any]:
        if self.secret is not None:
            return {"name": self.name, "valueFrom": self.secret.to_manifest()}
        return {"name": self.name, "value": self.value}


class PortSpec(_Frozen):
    name: str
    port: int
    protocol: str = "TCP"


class ProbeSpec(_Frozen):
    kind: Literal["http", "tcp", "exec"]
    port: Optional[int] = None
    path: Optional[str] = None
    command: Tuple[str, ...] = ()
    initial_delay: int
    period: int
    timeout: int
    failure_threshold: int

    def to_manifest(self) -> Dict[str, Any]:
        if self.kind == "http":
            probe: Dict[str, Any] = {"httpGet": {"path": self.path, "port": self.port}}
        elif self.kind == "tcp":
            probe = {"tcpSocket": {"port": self.port}}
        else:
            probe = {"exec": {"command": list(self.command)}}
        probe.update({
            "initialDelaySeconds": self.initial_delay,
            "periodSeconds": self.period,
            "timeoutSeconds": self.timeout,
            "failureThreshold": self.failure_threshold,
        })
        return probe


class VolumeSpec(_Frozen):
    """A pod volume backed by a claim or a config bundle, and where it is mounted."""
    name: str
    mount_path: str
    claim_name: Optional[str] = None
    config_map: Optional[str] = None
    read_only: bool = False

    def to_volume(self) -> Dict[str, Any]:
        if self.claim_name is not None:
            return {"name": self.name, "persistentVolumeClaim": {"claimName": self.claim_name}}
        return {"name": self.name, "configMap": {"name": self.config_map}}

    def to_mount(self) -> Dict[str, Any]:
        mount: Dict[str, Any] = {"name": self.name, "mountPath": self.mount_path}
        if self.read_only:
            mount["readOnly"] = True
        return mount


class StorageDescriptor(_Frozen):
    name: str
    namespace: str
    size: str
    storage_class: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)

    def to_manifest(self) -> Dict[str, Any]:
        spec: Dict[str, Any] = {
            "accessModes": ["ReadWriteOnce"],
            "resources": {"requests": {"storage": self.size}},
        }
        if self.storage_class:
            spec["storageClassName"] = self.storage_class
        return {
            "apiVersion": "v1",
            "kind": "PersistentVolumeClaim",
            "metadata": _metadata(self.name, self.namespace, self.labels),
            "spec": spec,
        }


class ConfigBundleDescriptor(_Frozen):
    name: str
    namespace: str
    data: Dict[str, str]
    labels: Dict[str, str] = Field(default_factory=dict)

    def to_manifest(self) -> Dict[str, Any]:
        return {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": _metadata(self.name, self.namespace, self.labels),
            "data": dict(self.data),
        }


class ServiceDescriptor(_Frozen):
    name: str
    namespace: str
    ports: Tuple[PortSpec, ...]
    selector: Dict[str, str]
    labels: Dict[str, str] = Field(default_factory=dict)

    def to_manifest(self) -> Dict[str, Any]:
        return {
            "apiVersion": "v1",
            "kind": "Service",
            "metadata": _metadata(self.name, self.namespace, self.labels),
            "spec": {
                "type": "ClusterIP",
                "selector": dict(self.selector),
                "ports": [
                    {"name": p.name, "port": p.port, "targetPort": p.port, "protocol": p.protocol}
                    for p in self.ports
                ],
            },
        }


class WorkloadDescriptor(_Frozen):
    name: str
    namespace: str
    container: str
    image: str
    pull_policy: str
    ports: Tuple[PortSpec, ...] = ()
    env: Tuple[EnvVar, ...] = ()
    env_from: Tuple[str, ...] = ()
    requests: Dict[str, str] = Field(default_factory=dict)
    limits: Dict[str, str] = Field(default_factory=dict)
    liveness: Optional[ProbeSpec] = None
    readiness: Optional[ProbeSpec] = None
    command: Tuple[str, ...] = ()
    volumes: Tuple[VolumeSpec, ...] = ()
    node_selector: Dict[str, str] = Field(default_factory=dict)
    tolerations: Tuple[Dict[str, str], ...] = ()
    labels: Dict[str, str] = Field(default_factory=dict)
    selector: Dict[str, str] = Field(default_factory=dict)

    def secret_refs(self) -> List[SecretRef]:
        return [e.secret for e in self.env if e.secret is not None]

    def to_manifest(self) -> Dict[str, Any]:
        container: Dict[str, Any] = {
            "name": self.container,
            "image": self.image,
            "imagePullPolicy": self.pull_policy,
        }
        if self.command:
            container["command"] = list(self.command)
        if self.ports:
            container["ports"] = [
                {"name": p.name, "containerPort": p.port, "protocol": p.protocol} for p in self.ports
            ]
        if self.env_from:
            container["envFrom"] = [{"configMapRef": {"name": ref}} for ref in self.env_from]
        if self.env:
            container["env"] = [e.to_manifest() for e in self.env]
        resources: Dict[str, Any] = {"requests": dict(self.requests)}
        if self.limits:
            resources["limits"] = dict(self.limits)
        container["resources"] = resources
        if self.liveness is not None:
            container["livenessProbe"] = self.liveness.to_manifest()
        if self.readiness is not None:
            container["readinessProbe"] = self.readiness.to_manifest()
        if self.volumes:
            container["volumeMounts"] = [v.to_mount() for v in self.volumes]

        pod_spec: Dict[str, Any] = {"containers": [container]}
        if self.volumes:
            pod_spec["volumes"] = [v.to_volume() for v in self.volumes]
        if self.node_selector:
            pod_spec["nodeSelector"] = dict(self.node_selector)
        if self.tolerations:
            pod_spec["tolerations"] = [dict(t) for t in self.tolerations]

        return {
            "apiVersion": "apps/v1",
            "kind": "Deployment",
            "metadata": _metadata(self.name, self.namespace, self.labels),
            "spec": {
                "replicas": 1,
                "selector": {"matchLabels": dict(self.selector)},
                "template": {
                    "metadata": {"labels": dict(self.selector)},
                    "spec": pod_spec,
                },
            },
        }


class ComponentResources(_Frozen):
    """Everything one component owns: a workload, an optional claim and service, config bundles."""
    component: str
    workload: WorkloadDescriptor
    storage: Optional[StorageDescriptor] = None
    service: Optional[ServiceDescriptor] = None
    config_bundles: Tuple[ConfigBundleDescriptor, ...] = ()

    def manifests(self) -> List[Dict[str, Any]]:
        docs = [bundle.to_manifest() for bundle in self.config_bundles]
        if self.storage is not None:
            docs.append(self.storage.to_manifest())
        docs.append(self.workload.to_manifest())
        if self.service is not None:
            docs.append(self.service.to_manifest())
        return docs


class ResourceGraph(_Frozen):
    """
    The result of one compilation: namespace, final shared environment,
    per-component resources in build order and ingress routing objects.
    """
    namespace: str
    environment: Dict[str, str]
    components: Tuple[ComponentResources, ...] = ()
    ingress: Tuple[Dict[str, Any], ...] = ()

    def component(self, name: str) -> Optional[ComponentResources]:
        for res in self.components:
            if res.component == name:
                return res
        return None

    @property
    def component_names(self) -> List[str]:
        return [res.component for res in self.components]

    def environment_bundle(self) -> ConfigBundleDescriptor:
        return ConfigBundleDescriptor(
            name=constants.SHARED_ENV_NAME,
            namespace=self.namespace,
            data=self.environment,
            labels={constants.LABEL_PART_OF: constants.RESOURCE_PREFIX},
        )

    def manifests(self) -> List[Dict[str, Any]]:
        docs: List[Dict[str, Any]] = [
            {"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": self.namespace}},
            self.environment_bundle().to_manifest(),
        ]
        for res in self.components:
            docs.extend(res.manifests())
        docs.extend(dict(obj) for obj in self.ingress)
        return docs
