import logging
from typing import Any, Dict, List, Optional

from .. import constants
from ..constants import IngressType, Role
from ..config import DeploymentConfig, TraefikModel
from ..datacls import ComponentHandle
from ..exceptions import CompositionPreconditionError, UnsupportedFeatureError

logger = logging.getLogger(__name__)


class IngressComposer:
    """
    Phase 3: routing resources for web and mail traffic.

    Only Traefik is implemented. The web ingress goes to the front proxy;
    TCP routes send port 25 straight to the relay (postfix) and every other
    mail protocol to the front proxy.
    """
    def __init__(self, config: DeploymentConfig):
        self.config = config
        self.namespace = config.namespace

    def compose(self, front: Optional[ComponentHandle], relay: Optional[ComponentHandle]) -> List[Dict[str, Any]]:
        ingress = self.config.ingress
        if ingress.type == IngressType.NONE:
            logger.info("[Ingress] Ingress type 'none'; no routing resources created.")
            return []
        if ingress.type != IngressType.TRAEFIK:
            raise UnsupportedFeatureError(f"Ingress type '{ingress.type.value}' is not supported; use 'traefik' or 'none'.")

        traefik = ingress.traefik
        if front is None:
            raise CompositionPreconditionError("ingress", Role.FRONT.value)
        if relay is None:
            raise CompositionPreconditionError("ingress", Role.RELAY.value)
        if traefik is None or not traefik.hostname:
            raise CompositionPreconditionError(
                "ingress", "ingress.traefik.hostname",
                "Cannot compose 'ingress': 'ingress.traefik.hostname' is required.",
            )

        logger.debug(f"[Ingress] Composing Traefik routes for '{traefik.hostname}'...")
        resources = [self._web_ingress(traefik, front), self._tls_option()]
        if traefik.enable_tcp:
            resources.append(self._connection_limit(traefik))
            upstreams = {Role.FRONT: front, Role.RELAY: relay}
            for name, entry_point, role, port, tls in constants.MAIL_TCP_ROUTES:
                resources.append(self._tcp_route(name, entry_point, upstreams[role], port, tls))
        logger.info(f"[Ingress] Composed {len(resources)} Traefik resources.")
        return resources

    def _meta(self, name: str, **extra) -> Dict[str, Any]:
        meta = {"name": name, "namespace": self.namespace}
        meta.update(extra)
        return meta

    def _web_ingress(self, traefik: TraefikModel, front: ComponentHandle) -> Dict[str, Any]:
        return {
            "apiVersion": "networking.k8s.io/v1",
            "kind": "Ingress",
            "metadata": self._meta(
                f"{constants.RESOURCE_PREFIX}-webmail",
                annotations={constants.CERT_ISSUER_ANNOTATION: traefik.cert_issuer},
            ),
            "spec": {
                "ingressClassName": constants.TRAEFIK_INGRESS_CLASS,
                "tls": [{"hosts": [traefik.hostname], "secretName": constants.TLS_SECRET_NAME}],
                "rules": [{
                    "host": traefik.hostname,
                    "http": {"paths": [{
                        "path": "/",
                        "pathType": "Prefix",
                        "backend": {"service": {
                            "name": front.service_name,
                            "port": {"number": front.port("http")},
                        }},
                    }]},
                }],
            },
        }

    def _tls_option(self) -> Dict[str, Any]:
        return {
            "apiVersion": constants.TRAEFIK_API_VERSION,
            "kind": "TLSOption",
            "metadata": self._meta(constants.MAIL_TLS_OPTION_NAME),
            "spec": {
                "minVersion": constants.MAIL_TLS_MIN_VERSION,
                "cipherSuites": list(constants.MAIL_TLS_CIPHER_SUITES),
            },
        }

    def _connection_limit(self, traefik: TraefikModel) -> Dict[str, Any]:
        return {
            "apiVersion": constants.TRAEFIK_API_VERSION,
            "kind": "MiddlewareTCP",
            "metadata": self._meta(constants.SMTP_LIMIT_MIDDLEWARE_NAME),
            "spec": {"inFlightConn": {"amount": traefik.smtp_connection_limit}},
        }

    def _tcp_route(self, name: str, entry_point: str, upstream: ComponentHandle, port: int, tls: bool) -> Dict[str, Any]:
        route: Dict[str, Any] = {
            "match": "HostSNI(`*`)",
            "services": [{"name": upstream.service_name, "port": port}],
        }
        if upstream.has_role(Role.RELAY):
            route["middlewares"] = [{"name": constants.SMTP_LIMIT_MIDDLEWARE_NAME}]
        spec: Dict[str, Any] = {"entryPoints": [entry_point], "routes": [route]}
        if tls:
            spec["tls"] = {
                "secretName": constants.TLS_SECRET_NAME,
                "options": {"name": constants.MAIL_TLS_OPTION_NAME, "namespace": self.namespace},
            }
        return {
            "apiVersion": constants.TRAEFIK_API_VERSION,
            "kind": "IngressRouteTCP",
            "metadata": self._meta(name),
            "spec": spec,
        }
