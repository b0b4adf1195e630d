"""
Syntactic checks on a structurally valid DeploymentConfig.

`validate_config` runs once before anything is built and stops at the first
violation; the raised ConfigurationError names the offending field.
"""

import re
import ipaddress
import logging

from .config import DeploymentConfig
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_DOMAIN_RE = re.compile(
    r"^(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,}$",
    re.IGNORECASE | re.ASCII,
)
_PREFIX_RE = re.compile(r"^(?:[0-9]|[12][0-9]|3[0-2])$")
MAX_DOMAIN_LENGTH = 253


def is_valid_domain(value: str) -> bool:
    """
    ASCII labels of 1-63 alphanumerics/hyphens, no edge hyphens, alphabetic
    TLD of 2+ chars, at most 253 characters in total.
    """
    if not isinstance(value, str) or not value or len(value) > MAX_DOMAIN_LENGTH:
        return False
    return _DOMAIN_RE.fullmatch(value) is not None


def is_valid_cidr(value: str) -> bool:
    """IPv4 address with a decimal prefix length 0-32, e.g. ``10.42.0.0/16``."""
    if not isinstance(value, str):
        return False
    address, sep, prefix = value.partition("/")
    # netmask, hostmask and zero-padded forms are not CIDR
    if not sep or _PREFIX_RE.fullmatch(prefix) is None:
        return False
    try:
        ipaddress.IPv4Address(address)
    except ValueError:
        return False
    return True


def validate_domain(value: str, field: str):
    if not is_valid_domain(value):
        raise ConfigurationError(f'Invalid domain format for {field}: "{value}"', field=field)


def validate_cidr(value: str, field: str):
    if not is_valid_cidr(value):
        raise ConfigurationError(f'Invalid CIDR format for {field}: "{value}"', field=field)


def validate_config(config: DeploymentConfig) -> None:
    """Fail fast on the first malformed domain, hostname or subnet."""
    logger.debug("[Validation] Checking domain names and subnet...")
    validate_domain(config.domain, "domain")

    for i, hostname in enumerate(config.hostnames):
        validate_domain(hostname, f"hostnames[{i}]")

    account = config.mailu.initial_account
    if account is not None:
        validate_domain(account.domain, "mailu.initialAccount.domain")

    validate_cidr(config.subnet, "subnet")
    logger.debug("[Validation] Domain names and subnet are valid.")
