from enum import Enum

# --- Log and Debug ---
# Short aliases for module names to keep CLI/env concise
LOG_ALIAS_MAP = {
    "build": "mailubuilder.builder.build",
    "bld": "mailubuilder.builder.build",
    "env": "mailubuilder.builder.environment",
    "comp": "mailubuilder.builder.component",
    "cmp": "mailubuilder.builder.component",
    "disc": "mailubuilder.builder.discovery",
    "dsc": "mailubuilder.builder.discovery",
    "ing": "mailubuilder.builder.ingress",
    "ingress": "mailubuilder.builder.ingress",
    "conf": "mailubuilder.config",
    "val": "mailubuilder.validators",
    "emit": "mailubuilder.emit",
    "cat": "mailubuilder.components.catalog",
}

# Top-level modules within mailubuilder for auto-prefixing
KNOWN_TOP_MODULES = {
    "builder",
    "components",
    "datacls",
    "utils",
    "exceptions",
    "config",
    "validators",
    "emit",
    "cli",
}

LOG_LEVELS_ENV = "MAILUB_LOG_LEVELS"


# --- Deployment defaults ---
DEFAULT_NAMESPACE = "mailu"
DEFAULT_TIMEZONE = "UTC"
DEFAULT_POSTMASTER = "postmaster"
DEFAULT_MESSAGE_SIZE_LIMIT_MB = 50
DEFAULT_POSTGRES_PORT = 5432
DEFAULT_POSTGRES_DATABASE = "mailu"
DEFAULT_DB_SECRET_KEYS = {"username": "username", "password": "password"}
DEFAULT_REDIS_PORT = 6379
DEFAULT_INITIAL_ACCOUNT_USERNAME = "admin"
DEFAULT_INITIAL_ACCOUNT_MODE = "update"
DEFAULT_WEBMAIL_TYPE = "roundcube"

DEFAULT_IMAGE_REGISTRY = "ghcr.io/mailu"
DEFAULT_IMAGE_TAG = "2024.06"
DEFAULT_PULL_POLICY = "IfNotPresent"

DEFAULT_CERT_ISSUER = "letsencrypt-cluster-issuer"
DEFAULT_SMTP_CONNECTION_LIMIT = 15

HOSTNAMES_DELIMITER = ","
BYTES_PER_MB = 1024 * 1024


# --- Secret keys (key inside the referenced secret) ---
SECRET_KEY_MAILU = "secret-key"
SECRET_KEY_ADMIN_PASSWORD = "password"
SECRET_KEY_API_TOKEN = "token"


# --- Naming ---
RESOURCE_PREFIX = "mailu"
SHARED_ENV_NAME = "mailu-env"
CLUSTER_DOMAIN = "svc.cluster.local"
TLS_SECRET_NAME = "mailu-tls"
MAIL_TLS_OPTION_NAME = "mailu-mail-tls"
SMTP_LIMIT_MIDDLEWARE_NAME = "smtp-connection-limit"

LABEL_NAME = "app.kubernetes.io/name"
LABEL_COMPONENT = "app.kubernetes.io/component"
LABEL_PART_OF = "app.kubernetes.io/part-of"


class Component(str, Enum):
    ADMIN = "admin"
    FRONT = "front"
    POSTFIX = "postfix"
    DOVECOT = "dovecot"
    RSPAMD = "rspamd"
    WEBMAIL = "webmail"
    CLAMAV = "clamav"
    FETCHMAIL = "fetchmail"
    WEBDAV = "webdav"
    DOVECOT_SUBMISSION = "dovecot-submission"


class Role(str, Enum):
    ADMIN = "admin"
    FRONT = "front"
    RELAY = "relay"
    SMTP = "smtp"
    IMAP = "imap"
    ANTISPAM = "antispam"
    WEBMAIL = "webmail"
    ANTIVIRUS = "antivirus"
    WEBDAV = "webdav"
    SUBMISSION = "submission"


# Build order: on unless disabled, then off unless enabled
CORE_COMPONENTS = (
    Component.ADMIN,
    Component.FRONT,
    Component.POSTFIX,
    Component.DOVECOT,
    Component.RSPAMD,
)
OPTIONAL_COMPONENTS = (
    Component.WEBMAIL,
    Component.CLAMAV,
    Component.FETCHMAIL,
    Component.WEBDAV,
)
# Dependent component -> the toggle that decides whether it is built.
# Its prerequisites (ComponentSpec.requires) are checked before it runs.
DEPENDENT_COMPONENTS = {
    Component.DOVECOT_SUBMISSION: Component.WEBMAIL,
}


# --- Service discovery ---
# Shared-environment key -> role whose producer's FQDN it carries.
# FRONT_ADDRESS is read by the mail images as the submission relay host and the
# relay port is pinned to 25 by the dovecot override bundle, so it must point
# at the relay (postfix) service and not at the front service.
DISCOVERY_BINDINGS = (
    ("ADMIN_ADDRESS", Role.ADMIN),
    ("FRONT_ADDRESS", Role.RELAY),
    ("WEBMAIL_ADDRESS", Role.WEBMAIL),
    ("ANTISPAM_ADDRESS", Role.ANTISPAM),
    ("SMTP_ADDRESS", Role.SMTP),
    ("IMAP_ADDRESS", Role.IMAP),
    ("SUBMISSION_ADDRESS", Role.SUBMISSION),
)


# --- Workload defaults ---
LIVENESS_DEFAULTS = {"initial_delay": 30, "period": 10, "timeout": 5, "failure_threshold": 3}
READINESS_DEFAULTS = {"initial_delay": 10, "period": 5, "timeout": 3, "failure_threshold": 3}

SIZE_PATTERN = r"^\d+(?:Mi|Gi)$"
CPU_PATTERN = r"^\d+m$"

AMD64_ARCH_LABEL = "kubernetes.io/arch"


# --- Ingress ---
class IngressType(str, Enum):
    TRAEFIK = "traefik"
    NGINX = "nginx"
    NONE = "none"


TRAEFIK_API_VERSION = "traefik.io/v1alpha1"
TRAEFIK_INGRESS_CLASS = "traefik"
CERT_ISSUER_ANNOTATION = "cert-manager.io/cluster-issuer"
MAIL_TLS_MIN_VERSION = "VersionTLS12"
MAIL_TLS_CIPHER_SUITES = [
    "TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256",
    "TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256",
    "TLS_ECDHE_ECDSA_WITH_AES_256_GCM_SHA384",
    "TLS_ECDHE_RSA_WITH_AES_256_GCM_SHA384",
    "TLS_ECDHE_ECDSA_WITH_CHACHA20_POLY1305",
    "TLS_ECDHE_RSA_WITH_CHACHA20_POLY1305",
]

# (route name, entry point, upstream role, port, terminate TLS)
MAIL_TCP_ROUTES = (
    ("mailu-smtp", "smtp", Role.RELAY, 25, False),
    ("mailu-smtps", "smtps", Role.FRONT, 465, True),
    ("mailu-submission", "smtp-submission", Role.FRONT, 587, False),
    ("mailu-imap", "imap", Role.FRONT, 143, False),
    ("mailu-imaps", "imaps", Role.FRONT, 993, True),
    ("mailu-pop3", "pop3", Role.FRONT, 110, False),
    ("mailu-pop3s", "pop3s", Role.FRONT, 995, True),
)
