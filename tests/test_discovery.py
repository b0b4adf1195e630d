import pytest
from pydantic import ValidationError

from mailubuilder.builder import Builder, ServiceDiscoveryResolver
from mailubuilder.builder.discovery import find_provider
from mailubuilder.constants import Role
from mailubuilder.datacls import ComponentHandle, SharedEnvironment
from mailubuilder.exceptions import BuildError


def handle(name, *roles, service=True, namespace="mailu"):
    return ComponentHandle(
        name=name,
        namespace=namespace,
        roles=roles,
        service_name=f"mailu-{name}" if service else None,
    )


CORE_HANDLES = [
    handle("admin", Role.ADMIN),
    handle("front", Role.FRONT),
    handle("postfix", Role.SMTP, Role.RELAY),
    handle("dovecot", Role.IMAP),
    handle("rspamd", Role.ANTISPAM),
]


@pytest.fixture
def sealed_env():
    env = SharedEnvironment()
    env.phase1().set("DOMAIN", "example.com")
    env.seal()
    return env


class TestFindProvider:
    """Tests for role lookup over built handles."""

    def test_first_declaring_handle_wins(self):
        handles = [handle("postfix", Role.SMTP, Role.RELAY), handle("other", Role.RELAY)]
        assert find_provider(handles, Role.RELAY).name == "postfix"

    def test_missing_role(self):
        assert find_provider(CORE_HANDLES, Role.WEBMAIL) is None

    def test_resolver_and_builder_share_lookup(self, make_config):
        builder = Builder(make_config())
        builder.run()
        resolver = ServiceDiscoveryResolver(builder.handles.values())
        for role in (Role.FRONT, Role.RELAY, Role.ADMIN):
            assert builder._provider(role) is resolver.find(role)


class TestServiceDiscoveryResolver:
    """Tests for role -> address bindings."""

    def test_core_bindings(self):
        bindings = ServiceDiscoveryResolver(CORE_HANDLES).resolve()
        assert list(bindings) == ['ADMIN_ADDRESS', 'FRONT_ADDRESS', 'ANTISPAM_ADDRESS', 'SMTP_ADDRESS', 'IMAP_ADDRESS']

    def test_front_address_resolves_to_relay(self):
        """The key named for the front proxy carries the relay's address."""
        bindings = ServiceDiscoveryResolver(CORE_HANDLES).resolve()
        assert bindings['FRONT_ADDRESS'] == 'mailu-postfix.mailu.svc.cluster.local'
        assert 'mailu-front' not in bindings['FRONT_ADDRESS']

    def test_front_alone_binds_nothing(self):
        assert ServiceDiscoveryResolver([handle("front", Role.FRONT)]).resolve() == {}

    def test_absent_producers_leave_no_key(self):
        bindings = ServiceDiscoveryResolver([handle("admin", Role.ADMIN)]).resolve()
        assert bindings == {'ADMIN_ADDRESS': 'mailu-admin.mailu.svc.cluster.local'}

    def test_handles_without_roles_are_ignored(self):
        handles = CORE_HANDLES + [handle("fetchmail", service=False)]
        assert len(ServiceDiscoveryResolver(handles).resolve()) == 5

    def test_optional_bindings(self):
        handles = CORE_HANDLES + [
            handle("webmail", Role.WEBMAIL),
            handle("dovecot-submission", Role.SUBMISSION),
        ]
        bindings = ServiceDiscoveryResolver(handles).resolve()
        assert bindings['WEBMAIL_ADDRESS'] == 'mailu-webmail.mailu.svc.cluster.local'
        assert bindings['SUBMISSION_ADDRESS'] == 'mailu-dovecot-submission.mailu.svc.cluster.local'

    def test_namespace_in_fqdn(self):
        bindings = ServiceDiscoveryResolver([handle("admin", Role.ADMIN, namespace="mail")]).resolve()
        assert bindings['ADMIN_ADDRESS'] == 'mailu-admin.mail.svc.cluster.local'

    def test_apply_appends_to_environment(self, sealed_env):
        ServiceDiscoveryResolver(CORE_HANDLES).apply(sealed_env)
        assert list(sealed_env)[0] == 'DOMAIN'
        assert sealed_env['SMTP_ADDRESS'] == 'mailu-postfix.mailu.svc.cluster.local'

    def test_apply_never_overwrites(self, sealed_env):
        ServiceDiscoveryResolver(CORE_HANDLES).apply(sealed_env)
        with pytest.raises(BuildError):
            ServiceDiscoveryResolver(CORE_HANDLES).apply(sealed_env)

    def test_apply_requires_sealed_environment(self):
        with pytest.raises(BuildError):
            ServiceDiscoveryResolver(CORE_HANDLES).apply(SharedEnvironment())


class TestComponentHandle:
    """Tests for the consumption surface of a component."""

    def test_handle_is_immutable(self):
        h = handle("admin", Role.ADMIN)
        with pytest.raises(ValidationError):
            h.service_name = "other"

    def test_fqdn_without_service_raises(self):
        with pytest.raises(BuildError, match="no network endpoint"):
            handle("fetchmail", service=False).fqdn

    def test_unknown_port_raises(self):
        with pytest.raises(BuildError, match="no port named"):
            handle("admin", Role.ADMIN).port("smtp")
