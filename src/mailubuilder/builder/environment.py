import logging

from .. import constants
from ..config import DeploymentConfig
from ..datacls import SharedEnvironment

logger = logging.getLogger(__name__)


class SharedEnvironmentBuilder:
    """
    Builds the phase-1 shared environment: every key derivable from the
    configuration alone. Defaults for optional fields are resolved here and
    nowhere else.
    """
    def __init__(self, config: DeploymentConfig):
        self.config = config

    def build(self) -> SharedEnvironment:
        cfg = self.config
        env = SharedEnvironment()
        writer = env.phase1()
        logger.debug("[Environment] Building configuration-derived keys...")

        writer.set("DOMAIN", cfg.domain)
        writer.set("HOSTNAMES", constants.HOSTNAMES_DELIMITER.join(cfg.hostnames))
        writer.set("SUBNET", cfg.subnet)
        writer.set("TIMEZONE", cfg.timezone)

        account = cfg.mailu.initial_account
        writer.set("POSTMASTER", account.username if account else constants.DEFAULT_POSTMASTER)
        writer.set("MESSAGE_SIZE_LIMIT", cfg.mailu.message_size_limit * constants.BYTES_PER_MB)

        writer.set("DB_FLAVOR", cfg.database.type)
        if cfg.database.type == "postgresql":
            pg = cfg.database.postgresql
            writer.set("DB_HOST", pg.host)
            writer.set("DB_PORT", pg.port)
            writer.set("DB_NAME", pg.database)

        writer.set("REDIS_ADDRESS", f"{cfg.redis.host}:{cfg.redis.port}")

        if cfg.mailu.log_level:
            writer.set("LOG_LEVEL", cfg.mailu.log_level)

        writer.set("TLS_FLAVOR", "traefik" if cfg.traefik_enabled else "notls")
        writer.set("WEBMAIL", cfg.mailu.webmail_type if cfg.components.webmail else "none")

        logger.debug(f"[Environment] Phase-1 keys: {list(env.keys())}")
        return env
