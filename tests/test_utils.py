import logging
import pytest

from mailubuilder.exceptions import ConfigurationError
from mailubuilder.utils import quantities, check_size, check_cpu, parse_module_levels
from mailubuilder.utils.logger import _normalize_module_name, _apply_module_levels
from mailubuilder.utils.resources import size_to_mebibytes, cpu_to_millicores


class TestQuantities:
    """Tests for size and CPU quantity checks."""

    @pytest.mark.parametrize("value", ["1Mi", "512Mi", "5Gi", "100Gi"])
    def test_valid_sizes(self, value):
        assert check_size(value, "x") == value

    @pytest.mark.parametrize("value", ["5GB", "5", "1.5Gi", "Gi", "5gi", "5Ti", ""])
    def test_invalid_sizes(self, value):
        with pytest.raises(ConfigurationError, match="Invalid size format for x") as exc_info:
            check_size(value, "x")
        assert exc_info.value.field == "x"

    @pytest.mark.parametrize("value", ["100m", "1000m", "1m"])
    def test_valid_cpu(self, value):
        assert check_cpu(value, "x") == value

    @pytest.mark.parametrize("value", ["1", "0.5", "100", "m", "100M", ""])
    def test_invalid_cpu(self, value):
        with pytest.raises(ConfigurationError, match="Invalid CPU format"):
            check_cpu(value, "x")

    def test_quantities_drops_unset(self):
        assert quantities(None, "1Gi", "resources.admin.limits") == {"memory": "1Gi"}
        assert quantities(None, None, "resources.admin.limits") == {}

    def test_quantities_names_nested_field(self):
        with pytest.raises(ConfigurationError) as exc_info:
            quantities("1", None, "resources.admin.requests")
        assert exc_info.value.field == "resources.admin.requests.cpu"

    def test_conversions(self):
        assert size_to_mebibytes("2Gi") == 2048
        assert size_to_mebibytes("512Mi") == 512
        assert cpu_to_millicores("250m") == 250


@pytest.fixture
def restore_levels():
    """Reset the named loggers to NOTSET and restore their levels afterwards."""
    saved = {}

    def _track(*names):
        for name in names:
            log = logging.getLogger(name)
            saved[name] = log.level
            log.setLevel(logging.NOTSET)
    yield _track
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


class TestLogLevels:
    """Tests for per-module log level configuration."""

    def test_parse_module_levels(self):
        assert parse_module_levels("disc=debug, comp=INFO,bad,") == {"disc": "DEBUG", "comp": "INFO"}
        assert parse_module_levels("") is None

    @pytest.mark.parametrize("name, expected", [
        ("disc", "mailubuilder.builder.discovery"),
        ("builder.*", "mailubuilder.builder"),
        ("config", "mailubuilder.config"),
        ("mailubuilder.emit", "mailubuilder.emit"),
        ("yaml", "yaml"),
    ])
    def test_normalize_module_name(self, name, expected):
        assert _normalize_module_name(name) == expected

    def test_apply_module_levels(self, restore_levels):
        restore_levels("mailubuilder.builder.ingress", "mailubuilder.builder.environment")
        _apply_module_levels({"ing": "WARNING", "env": "NOPE"})
        assert logging.getLogger("mailubuilder.builder.ingress").level == logging.WARNING
        assert logging.getLogger("mailubuilder.builder.environment").level == logging.NOTSET

    def test_env_var_levels(self, monkeypatch, restore_levels):
        restore_levels("mailubuilder.emit")
        monkeypatch.setenv("MAILUB_LOG_LEVELS", "emit=ERROR")
        _apply_module_levels(None)
        assert logging.getLogger("mailubuilder.emit").level == logging.ERROR
