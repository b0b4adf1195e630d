import re
import logging
from typing import Dict, Optional

from .. import constants
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_SIZE_RE = re.compile(constants.SIZE_PATTERN)
_CPU_RE = re.compile(constants.CPU_PATTERN)


def check_size(value: str, field: str) -> str:
    """Accept ``<int>Mi`` or ``<int>Gi``; return the value unchanged."""
    if not isinstance(value, str) or not _SIZE_RE.match(value):
        raise ConfigurationError(
            f'Invalid size format for {field}: "{value}". Expected format: <number>Mi or <number>Gi',
            field=field,
        )
    return value


def check_cpu(value: str, field: str) -> str:
    """Accept millicores, ``<int>m``; return the value unchanged."""
    if not isinstance(value, str) or not _CPU_RE.match(value):
        raise ConfigurationError(
            f'Invalid CPU format for {field}: "{value}". Expected format: <number>m',
            field=field,
        )
    return value


def size_to_mebibytes(value: str) -> int:
    if value.endswith("Gi"):
        return int(value[:-2]) * 1024
    return int(value[:-2])


def cpu_to_millicores(value: str) -> int:
    return int(value[:-1])


def quantities(cpu: Optional[str], memory: Optional[str], field: str) -> Dict[str, str]:
    """Validated ``{cpu, memory}`` map, dropping unset entries."""
    result = {}
    if cpu is not None:
        result["cpu"] = check_cpu(cpu, f"{field}.cpu")
    if memory is not None:
        result["memory"] = check_size(memory, f"{field}.memory")
    return result
