import pytest

from mailubuilder.builder import IngressComposer
from mailubuilder.constants import Role
from mailubuilder.datacls import ComponentHandle, PortSpec
from mailubuilder.exceptions import CompositionPreconditionError, UnsupportedFeatureError

FRONT = ComponentHandle(
    name="front",
    namespace="mailu",
    roles=(Role.FRONT,),
    service_name="mailu-front",
    ports=(PortSpec(name="http", port=80), PortSpec(name="smtps", port=465)),
)
RELAY = ComponentHandle(
    name="postfix",
    namespace="mailu",
    roles=(Role.SMTP, Role.RELAY),
    service_name="mailu-postfix",
    ports=(PortSpec(name="smtp", port=25),),
)


@pytest.fixture
def ingress_config(make_config):
    def _make(**traefik):
        traefik.setdefault('hostname', 'mail.example.com')
        return make_config(ingress={'enabled': True, 'type': 'traefik', 'traefik': traefik})
    return _make


def by_name(resources):
    return {obj['metadata']['name']: obj for obj in resources}


class TestIngressComposer:
    """Tests for Traefik routing resources."""

    def test_web_ingress(self, ingress_config):
        resources = by_name(IngressComposer(ingress_config()).compose(FRONT, RELAY))
        web = resources['mailu-webmail']
        assert web['kind'] == 'Ingress'
        assert web['metadata']['namespace'] == 'mailu'
        assert web['metadata']['annotations'] == {'cert-manager.io/cluster-issuer': 'letsencrypt-cluster-issuer'}
        assert web['spec']['ingressClassName'] == 'traefik'
        assert web['spec']['tls'] == [{'hosts': ['mail.example.com'], 'secretName': 'mailu-tls'}]
        rule = web['spec']['rules'][0]
        assert rule['host'] == 'mail.example.com'
        path = rule['http']['paths'][0]
        assert (path['path'], path['pathType']) == ('/', 'Prefix')
        assert path['backend']['service'] == {'name': 'mailu-front', 'port': {'number': 80}}

    def test_tls_option(self, ingress_config):
        option = by_name(IngressComposer(ingress_config()).compose(FRONT, RELAY))['mailu-mail-tls']
        assert option['kind'] == 'TLSOption'
        assert option['spec']['minVersion'] == 'VersionTLS12'
        assert len(option['spec']['cipherSuites']) == 6

    def test_tcp_routes(self, ingress_config):
        resources = by_name(IngressComposer(ingress_config(smtpConnectionLimit=30)).compose(FRONT, RELAY))
        assert resources['smtp-connection-limit']['spec'] == {'inFlightConn': {'amount': 30}}

        expected = {
            'mailu-smtp': ('smtp', 'mailu-postfix', 25, False),
            'mailu-smtps': ('smtps', 'mailu-front', 465, True),
            'mailu-submission': ('smtp-submission', 'mailu-front', 587, False),
            'mailu-imap': ('imap', 'mailu-front', 143, False),
            'mailu-imaps': ('imaps', 'mailu-front', 993, True),
            'mailu-pop3': ('pop3', 'mailu-front', 110, False),
            'mailu-pop3s': ('pop3s', 'mailu-front', 995, True),
        }
        for name, (entry_point, service, port, tls) in expected.items():
            route = resources[name]
            assert route['kind'] == 'IngressRouteTCP'
            assert route['spec']['entryPoints'] == [entry_point]
            rule = route['spec']['routes'][0]
            assert rule['match'] == 'HostSNI(`*`)'
            assert rule['services'] == [{'name': service, 'port': port}]
            assert ('tls' in route['spec']) is tls
            if tls:
                assert route['spec']['tls']['secretName'] == 'mailu-tls'
                assert route['spec']['tls']['options']['name'] == 'mailu-mail-tls'

    def test_only_smtp_route_is_rate_limited(self, ingress_config):
        resources = IngressComposer(ingress_config()).compose(FRONT, RELAY)
        limited = [
            obj['metadata']['name'] for obj in resources
            if obj['kind'] == 'IngressRouteTCP' and 'middlewares' in obj['spec']['routes'][0]
        ]
        assert limited == ['mailu-smtp']

    def test_tcp_disabled(self, ingress_config):
        resources = IngressComposer(ingress_config(enableTcp=False)).compose(FRONT, RELAY)
        assert [obj['kind'] for obj in resources] == ['Ingress', 'TLSOption']

    def test_custom_cert_issuer(self, ingress_config):
        web = by_name(IngressComposer(ingress_config(certIssuer='staging')).compose(FRONT, RELAY))['mailu-webmail']
        assert web['metadata']['annotations']['cert-manager.io/cluster-issuer'] == 'staging'

    @pytest.mark.parametrize("front, relay, missing", [
        (None, RELAY, 'front'),
        (FRONT, None, 'relay'),
        (None, None, 'front'),
    ])
    def test_missing_upstreams(self, ingress_config, front, relay, missing):
        with pytest.raises(CompositionPreconditionError) as exc_info:
            IngressComposer(ingress_config()).compose(front, relay)
        assert exc_info.value.missing == missing
        assert exc_info.value.composer == 'ingress'

    def test_missing_hostname(self, make_config):
        config = make_config(ingress={'enabled': True, 'traefik': {}})
        with pytest.raises(CompositionPreconditionError, match="hostname"):
            IngressComposer(config).compose(FRONT, RELAY)

    def test_missing_traefik_block(self, make_config):
        config = make_config(ingress={'enabled': True})
        with pytest.raises(CompositionPreconditionError):
            IngressComposer(config).compose(FRONT, RELAY)

    def test_type_none_builds_nothing(self, make_config):
        config = make_config(ingress={'enabled': True, 'type': 'none'})
        assert IngressComposer(config).compose(None, None) == []

    def test_nginx_is_unsupported(self, make_config):
        config = make_config(ingress={'enabled': True, 'type': 'nginx'})
        with pytest.raises(UnsupportedFeatureError):
            IngressComposer(config).compose(FRONT, RELAY)
