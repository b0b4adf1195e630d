import yaml
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional, Literal, Union
from pydantic import BaseModel, Field, ValidationError, model_validator, ConfigDict
from pydantic.alias_generators import to_camel

from . import constants
from .constants import Component, IngressType
from .exceptions import (
    ConfigParsingError,
    ConfigFileMissingError,
    ConfigValidationError,
)


logger = logging.getLogger(__name__)


class _Section(BaseModel):
    """Shared settings: camelCase keys on input, snake_case attributes, unknown keys rejected."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class DbSecretKeys(_Section):
    username: str = constants.DEFAULT_DB_SECRET_KEYS["username"]
    password: str = constants.DEFAULT_DB_SECRET_KEYS["password"]


class PostgresModel(_Section):
    """
        Class Config-Validation Model describe `database.postgresql`
    """
    host: str
    port: int = constants.DEFAULT_POSTGRES_PORT
    database: str = constants.DEFAULT_POSTGRES_DATABASE
    secret_name: str
    secret_keys: DbSecretKeys = Field(default_factory=DbSecretKeys)


class DatabaseModel(_Section):
    """
        Class Config-Validation Model describe `database`
    """
    type: Literal["postgresql", "sqlite"]
    postgresql: Optional[PostgresModel] = None

    @model_validator(mode='after')
    def check_backend_block(self) -> 'DatabaseModel':
        """PostgreSQL needs its connection block"""
        if self.type == "postgresql" and self.postgresql is None:
            raise ConfigValidationError(
                "Database type 'postgresql' requires a 'database.postgresql' block.",
                field="database.postgresql",
            )
        return self


class RedisModel(_Section):
    host: str
    port: int = constants.DEFAULT_REDIS_PORT


class SecretsModel(_Section):
    """
        Class Config-Validation Model describe `secrets`

    Only secret *names* are held here; values live in the cluster secret store.
    """
    mailu_secret_key: str
    initial_admin_password: Optional[str] = None
    api_token: Optional[str] = None


class ComponentStorageModel(_Section):
    size: Optional[str] = None
    storage_class: Optional[str] = None


class StorageModel(_Section):
    storage_class: Optional[str] = None
    admin: Optional[ComponentStorageModel] = None
    postfix: Optional[ComponentStorageModel] = None
    dovecot: Optional[ComponentStorageModel] = None
    rspamd: Optional[ComponentStorageModel] = None
    clamav: Optional[ComponentStorageModel] = None
    webmail: Optional[ComponentStorageModel] = None
    webdav: Optional[ComponentStorageModel] = None

    def for_component(self, component: Component) -> ComponentStorageModel:
        return getattr(self, component.value, None) or ComponentStorageModel()


class ComponentsModel(_Section):
    """
        Class Config-Validation Model describe `components`

    Core components are on unless disabled, optional ones are off unless enabled.
    """
    admin: bool = True
    front: bool = True
    postfix: bool = True
    dovecot: bool = True
    rspamd: bool = True
    webmail: bool = False
    clamav: bool = False
    fetchmail: bool = False
    webdav: bool = False

    def is_enabled(self, component: Component) -> bool:
        return getattr(self, component.value)


class QuantityModel(_Section):
    cpu: Optional[str] = None
    memory: Optional[str] = None


class ResourceSizingModel(_Section):
    requests: QuantityModel = Field(default_factory=QuantityModel)
    limits: QuantityModel = Field(default_factory=QuantityModel)


class ResourcesModel(_Section):
    admin: Optional[ResourceSizingModel] = None
    front: Optional[ResourceSizingModel] = None
    postfix: Optional[ResourceSizingModel] = None
    dovecot: Optional[ResourceSizingModel] = None
    rspamd: Optional[ResourceSizingModel] = None
    webmail: Optional[ResourceSizingModel] = None
    clamav: Optional[ResourceSizingModel] = None
    fetchmail: Optional[ResourceSizingModel] = None
    webdav: Optional[ResourceSizingModel] = None
    dovecot_submission: Optional[ResourceSizingModel] = None

    def for_component(self, component: Component) -> ResourceSizingModel:
        return getattr(self, component.value.replace("-", "_"), None) or ResourceSizingModel()


class InitialAccountModel(_Section):
    enabled: bool = True
    username: str = constants.DEFAULT_INITIAL_ACCOUNT_USERNAME
    domain: str
    mode: Literal["create", "update", "ifmissing"] = constants.DEFAULT_INITIAL_ACCOUNT_MODE


class MailuModel(_Section):
    log_level: Optional[str] = None
    message_size_limit: int = constants.DEFAULT_MESSAGE_SIZE_LIMIT_MB
    initial_account: Optional[InitialAccountModel] = None
    api_enabled: bool = False
    webmail_type: Literal["roundcube", "snappymail"] = constants.DEFAULT_WEBMAIL_TYPE


class ImagesModel(_Section):
    registry: str = constants.DEFAULT_IMAGE_REGISTRY
    tag: str = constants.DEFAULT_IMAGE_TAG
    pull_policy: str = constants.DEFAULT_PULL_POLICY


class TraefikModel(_Section):
    hostname: Optional[str] = None
    cert_issuer: str = constants.DEFAULT_CERT_ISSUER
    enable_tcp: bool = True
    smtp_connection_limit: int = constants.DEFAULT_SMTP_CONNECTION_LIMIT


class IngressModel(_Section):
    enabled: bool = False
    type: IngressType = IngressType.TRAEFIK
    traefik: Optional[TraefikModel] = None


class DeploymentConfig(_Section):
    """
        Class Config-Validation Model describe top-level of config
    """
    namespace: str = constants.DEFAULT_NAMESPACE
    domain: str
    hostnames: List[str] = Field(min_length=1)
    subnet: str
    timezone: str = constants.DEFAULT_TIMEZONE
    database: DatabaseModel
    redis: RedisModel
    secrets: SecretsModel
    storage: StorageModel = Field(default_factory=StorageModel)
    components: ComponentsModel = Field(default_factory=ComponentsModel)
    resources: ResourcesModel = Field(default_factory=ResourcesModel)
    mailu: MailuModel = Field(default_factory=MailuModel)
    images: ImagesModel = Field(default_factory=ImagesModel)
    ingress: IngressModel = Field(default_factory=IngressModel)

    @property
    def traefik_enabled(self) -> bool:
        return self.ingress.enabled and self.ingress.type == IngressType.TRAEFIK


class Config:
    """
    Loads and validates a deployment description using Pydantic models.
    It is the sole gatekeeper for configuration.

    `source` is either a path to a YAML file or an already-parsed mapping.
    """
    def __init__(self, source: Union[str, Path, Dict[str, Any]]):
        if isinstance(source, dict):
            self.path = None
            raw_data = source
        else:
            self.path = str(source)
            logger.info(f"Loading configuration from '{self.path}'...")
            raw_data = self._load_raw_config()

        logger.info("Validating configuration structure with Pydantic...")
        try:
            self.model = DeploymentConfig.model_validate(raw_data)
            logger.debug(f"Configuration model validated successfully: \n{self.model.model_dump_json(indent=2)}")
            logger.info("Configuration validation passed.")
        except ValidationError as e:
            first = e.errors()[0]
            field = _format_loc(first["loc"])
            raise ConfigValidationError(f"Configuration validation failed at '{field}':\n{e}", field=field)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        return cls(data)

    def _load_raw_config(self) -> Dict[str, Any]:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
            if not isinstance(config_data, dict):
                raise ConfigParsingError("Configuration file must be a YAML document containing a dictionary.")
            logger.debug(f"Successfully parsed YAML from '{self.path}'.")
            return config_data
        except FileNotFoundError:
            raise ConfigFileMissingError(f"Configuration file not found at: {self.path}")
        except yaml.YAMLError as e:
            raise ConfigParsingError(f"Error parsing YAML file: {e}")

    @property
    def namespace(self) -> str:
        return self.model.namespace

    @property
    def domain(self) -> str:
        return self.model.domain


def _format_loc(loc) -> str:
    """Render a pydantic error location as ``a.b[0].c``."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path
