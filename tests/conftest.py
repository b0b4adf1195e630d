import copy
import pytest
import yaml
from pathlib import Path

from mailubuilder.config import DeploymentConfig

# End-to-end reference deployment: PostgreSQL, redis, core components only
BASE_CONFIG = {
    'domain': 'example.com',
    'hostnames': ['mail.example.com'],
    'subnet': '10.42.0.0/16',
    'database': {
        'type': 'postgresql',
        'postgresql': {
            'host': 'pg',
            'secretName': 'mailu-db',
        },
    },
    'redis': {'host': 'cache'},
    'secrets': {'mailuSecretKey': 'mailu-secrets'},
}


@pytest.fixture
def raw_config():
    """A fresh, mutable copy of the reference configuration tree."""
    return copy.deepcopy(BASE_CONFIG)


@pytest.fixture
def make_config(raw_config):
    """Build a DeploymentConfig from the reference tree plus top-level overrides."""
    def _make(**overrides) -> DeploymentConfig:
        data = copy.deepcopy(raw_config)
        data.update(overrides)
        return DeploymentConfig.model_validate(data)
    return _make


@pytest.fixture
def create_config_file(tmp_path: Path):
    """A pytest fixture to create a temporary mailu.yml file."""
    def _create_file(config_data: dict) -> Path:
        config_file = tmp_path / "mailu.yml"
        with open(config_file, 'w') as f:
            yaml.dump(config_data, f)
        return config_file
    return _create_file
