"""
The ten Mailu components.

Port tables here are part of the wiring contract: discovery bindings and
ingress routes depend on them.
"""

import logging
from typing import Dict, List

from .. import constants
from ..constants import Component, Role
from ..datacls import (
    ComponentContext,
    ConfigBundleDescriptor,
    EnvVar,
    PortSpec,
    SecretRef,
    VolumeSpec,
)
from .spec import ComponentSpec, ComponentExtras, ProbeDef, EXTENSIONS

logger = logging.getLogger(__name__)


def _ports(*pairs) -> tuple:
    return tuple(PortSpec(name=name, port=port) for name, port in pairs)


CATALOG: Dict[Component, ComponentSpec] = {
    Component.ADMIN: ComponentSpec(
        component=Component.ADMIN,
        image="admin",
        ports=_ports(("http", 80)),
        roles=(Role.ADMIN,),
        default_cpu="100m",
        default_memory="512Mi",
        storage_size="5Gi",
        mount_path="/data",
        probe=ProbeDef(kind="http", port=80, path="/health"),
        uses_db_credentials=True,
    ),
    Component.FRONT: ComponentSpec(
        component=Component.FRONT,
        image="nginx",
        ports=_ports(
            ("http", 80),
            ("https", 443),
            ("smtp", 25),
            ("smtps", 465),
            ("submission", 587),
            ("imap", 143),
            ("imaps", 993),
            ("pop3", 110),
            ("pop3s", 995),
        ),
        roles=(Role.FRONT,),
        default_cpu="100m",
        default_memory="256Mi",
        probe=ProbeDef(kind="http", port=80, path="/health"),
    ),
    Component.POSTFIX: ComponentSpec(
        component=Component.POSTFIX,
        image="postfix",
        ports=_ports(("smtp", 25), ("submission", 10025)),
        roles=(Role.SMTP, Role.RELAY),
        default_cpu="100m",
        default_memory="512Mi",
        storage_size="5Gi",
        mount_path="/queue",
        probe=ProbeDef(kind="tcp", port=25),
        uses_db_credentials=True,
    ),
    Component.DOVECOT: ComponentSpec(
        component=Component.DOVECOT,
        image="dovecot",
        ports=_ports(("imap", 143), ("imaps", 993), ("pop3", 110), ("pop3s", 995)),
        roles=(Role.IMAP,),
        default_cpu="200m",
        default_memory="1Gi",
        storage_size="100Gi",
        mount_path="/mail",
        probe=ProbeDef(kind="tcp", port=143),
        uses_db_credentials=True,
    ),
    Component.RSPAMD: ComponentSpec(
        component=Component.RSPAMD,
        image="rspamd",
        ports=_ports(("rspamd", 11334)),
        roles=(Role.ANTISPAM,),
        default_cpu="100m",
        default_memory="512Mi",
        storage_size="5Gi",
        mount_path="/var/lib/rspamd",
        probe=ProbeDef(kind="http", port=11334, path="/ping"),
    ),
    Component.WEBMAIL: ComponentSpec(
        component=Component.WEBMAIL,
        image="webmail",
        ports=_ports(("http", 80)),
        roles=(Role.WEBMAIL,),
        default_cpu="100m",
        default_memory="256Mi",
        storage_size="5Gi",
        mount_path="/data",
        probe=ProbeDef(kind="tcp", port=80),
        uses_db_credentials=True,
    ),
    Component.CLAMAV: ComponentSpec(
        component=Component.CLAMAV,
        image="clamav",
        ports=_ports(("clamav", 3310)),
        roles=(Role.ANTIVIRUS,),
        default_cpu="500m",
        default_memory="2Gi",
        storage_size="15Gi",
        mount_path="/data",
        # signature loading is slow
        probe=ProbeDef(
            kind="tcp",
            port=3310,
            liveness={"initial_delay": 60, "period": 30},
            readiness={"initial_delay": 30, "period": 10},
        ),
    ),
    Component.FETCHMAIL: ComponentSpec(
        component=Component.FETCHMAIL,
        image="fetchmail",
        expose_service=False,
        default_cpu="100m",
        default_memory="256Mi",
        probe=ProbeDef(
            kind="exec",
            command=("pgrep", "-f", "fetchmail"),
            liveness={"period": 60},
            readiness={"period": 10},
        ),
        static_env=(EnvVar(name="FETCHMAIL_DELAY", value="600"),),
        uses_mailu_secret=False,
    ),
    Component.WEBDAV: ComponentSpec(
        component=Component.WEBDAV,
        image="radicale",
        ports=_ports(("http", 5232)),
        roles=(Role.WEBDAV,),
        default_cpu="100m",
        default_memory="256Mi",
        storage_size="5Gi",
        mount_path="/data",
        probe=ProbeDef(
            kind="http",
            port=5232,
            path="/",
            liveness={"period": 30},
            readiness={"period": 10},
        ),
        uses_mailu_secret=False,
    ),
    Component.DOVECOT_SUBMISSION: ComponentSpec(
        component=Component.DOVECOT_SUBMISSION,
        image="dovecot/dovecot:2.3-latest",
        external_image=True,
        ports=_ports(("submission", 10025)),
        roles=(Role.SUBMISSION,),
        requires=(Role.SMTP,),
        default_cpu="100m",
        default_memory="256Mi",
        probe=ProbeDef(kind="tcp", port=10025),
        command=("/usr/sbin/dovecot", "-F", "-c", "/etc/dovecot/dovecot.conf"),
        uses_shared_env=False,
        uses_mailu_secret=False,
    ),
}


def get_spec(component: Component) -> ComponentSpec:
    return CATALOG[component]


@EXTENSIONS(Component.ADMIN)
def admin_extras(spec: ComponentSpec, ctx: ComponentContext) -> ComponentExtras:
    """Initial admin account bootstrap and the optional API token."""
    cfg = ctx.config
    env: List[EnvVar] = []

    password_secret = cfg.secrets.initial_admin_password
    account = cfg.mailu.initial_account
    if password_secret:
        env.append(EnvVar(
            name="INITIAL_ADMIN_PASSWORD",
            secret=SecretRef(name=password_secret, key=constants.SECRET_KEY_ADMIN_PASSWORD),
        ))
        if account is not None and account.enabled:
            env.append(EnvVar(name="INITIAL_ADMIN_ACCOUNT", value=account.username))
            env.append(EnvVar(name="INITIAL_ADMIN_DOMAIN", value=account.domain))
            env.append(EnvVar(name="INITIAL_ADMIN_MODE", value=account.mode))
    elif account is not None:
        logger.warning("[Admin] 'mailu.initialAccount' is set but 'secrets.initialAdminPassword' is not; skipping account bootstrap.")

    if cfg.mailu.api_enabled:
        if cfg.secrets.api_token:
            env.append(EnvVar(
                name="API_TOKEN",
                secret=SecretRef(name=cfg.secrets.api_token, key=constants.SECRET_KEY_API_TOKEN),
            ))
        else:
            logger.warning("[Admin] 'mailu.apiEnabled' is set but 'secrets.apiToken' is not; API stays disabled.")

    return ComponentExtras(env=tuple(env))


DOVECOT_OVERRIDE_CONF = """# Dovecot proxy override configuration
# Mounted at /overrides/dovecot/proxy.conf

# Relay submissions to postfix on port 25 instead of 10025
submission_relay_port = 25
"""


@EXTENSIONS(Component.FRONT)
def front_extras(spec: ComponentSpec, ctx: ComponentContext) -> ComponentExtras:
    """Mount the dovecot relay-port override into the front proxy."""
    name = f"{constants.RESOURCE_PREFIX}-dovecot-override"
    bundle = ConfigBundleDescriptor(
        name=name,
        namespace=ctx.config.namespace,
        data={"proxy.conf": DOVECOT_OVERRIDE_CONF},
        labels={
            constants.LABEL_NAME: f"{constants.RESOURCE_PREFIX}-{spec.name}",
            constants.LABEL_COMPONENT: "configuration",
            constants.LABEL_PART_OF: constants.RESOURCE_PREFIX,
        },
    )
    volume = VolumeSpec(name="dovecot-override", mount_path="/overrides/dovecot", config_map=name, read_only=True)
    return ComponentExtras(config_bundles=(bundle,), volumes=(volume,))


def render_submission_conf(domain: str, relay_host: str, relay_port: int, max_mail_size: int, listen_port: int) -> str:
    """dovecot.conf for a submission-only relay in front of postfix."""
    return f"""# Dovecot submission relay for webmail token authentication
log_path = /dev/stderr
auth_verbose = yes
login_log_format_elements = user=<%u> method=%m rip=%r rport=%b lip=%l lport=%a mpid=%e %c

protocols = submission

# mail user is UID 8
first_valid_uid = 8
last_valid_uid = 0

# relay only, nothing is stored
mail_location = maildir:/tmp/mail

postmaster_address = admin@{domain}
hostname = {domain}

submission_relay_host = {relay_host}
submission_relay_port = {relay_port}
submission_relay_trusted = yes
submission_relay_ssl = no
submission_max_mail_size = {max_mail_size}

listen = *

# token auth is checked by postfix and admin, accept here
passdb {{
  driver = static
  args = nopassword=y
}}

userdb {{
  driver = static
  args = uid=mail gid=mail home=/tmp
}}

service submission-login {{
  inet_listener submission {{
    port = {listen_port}
  }}
  service_count = 0
  client_limit = 25000
  process_min_avail = 8
  process_limit = 8
  vsz_limit = 256M
}}

service auth {{
  unix_listener auth-userdb {{
    mode = 0666
  }}
}}

ssl = no
disable_plaintext_auth = no
"""


@EXTENSIONS(Component.DOVECOT_SUBMISSION)
def dovecot_submission_extras(spec: ComponentSpec, ctx: ComponentContext) -> ComponentExtras:
    """Render dovecot.conf pointing at the relay peer and pin the pod to amd64 nodes."""
    relay = ctx.peer(Role.SMTP)
    cfg = ctx.config
    name = f"{constants.RESOURCE_PREFIX}-{spec.name}"
    conf = render_submission_conf(
        domain=cfg.domain,
        relay_host=relay.fqdn,
        relay_port=relay.port("smtp"),
        max_mail_size=cfg.mailu.message_size_limit * constants.BYTES_PER_MB,
        listen_port=spec.ports[0].port,
    )
    bundle = ConfigBundleDescriptor(
        name=name,
        namespace=cfg.namespace,
        data={"dovecot.conf": conf},
        labels={
            constants.LABEL_NAME: name,
            constants.LABEL_COMPONENT: "configuration",
            constants.LABEL_PART_OF: constants.RESOURCE_PREFIX,
        },
    )
    volume = VolumeSpec(name="config", mount_path="/etc/dovecot", config_map=name, read_only=True)
    # the upstream dovecot image is published for amd64 only
    return ComponentExtras(
        config_bundles=(bundle,),
        volumes=(volume,),
        node_selector={constants.AMD64_ARCH_LABEL: "amd64"},
        tolerations=({
            "key": constants.AMD64_ARCH_LABEL,
            "operator": "Equal",
            "value": "amd64",
            "effect": "NoSchedule",
        },),
    )
