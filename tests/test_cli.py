import pytest
from click.testing import CliRunner

from mailubuilder.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


class TestCli:
    """Tests for the command line entry points."""

    def test_build_to_stdout(self, runner, create_config_file, raw_config):
        path = create_config_file(raw_config)
        result = runner.invoke(cli, ['build', str(path)])
        assert result.exit_code == 0, result.output
        assert 'kind: Namespace' in result.output
        assert 'name: mailu-env' in result.output

    def test_build_to_file(self, runner, create_config_file, raw_config, tmp_path):
        path = create_config_file(raw_config)
        out = tmp_path / "manifests.yml"
        result = runner.invoke(cli, ['build', str(path), '-o', str(out)])
        assert result.exit_code == 0, result.output
        assert 'kind: Deployment' in out.read_text(encoding="utf-8")

    def test_env_command(self, runner, create_config_file, raw_config):
        path = create_config_file(raw_config)
        result = runner.invoke(cli, ['env', str(path)])
        assert result.exit_code == 0, result.output
        assert 'DOMAIN=example.com' in result.output
        assert 'REDIS_ADDRESS=cache:6379' in result.output
        assert 'FRONT_ADDRESS=mailu-postfix.mailu.svc.cluster.local' in result.output

    def test_validate_command(self, runner, create_config_file, raw_config):
        path = create_config_file(raw_config)
        result = runner.invoke(cli, ['validate', str(path)])
        assert result.exit_code == 0, result.output

    def test_invalid_config_aborts(self, runner, create_config_file, raw_config):
        raw_config['subnet'] = '10.42.0.0'
        path = create_config_file(raw_config)
        result = runner.invoke(cli, ['build', str(path)])
        assert result.exit_code != 0
        assert 'kind: Namespace' not in result.output

    def test_missing_file_aborts(self, runner, tmp_path):
        result = runner.invoke(cli, ['build', str(tmp_path / "missing.yml")])
        assert result.exit_code != 0

    def test_dependency_error_aborts(self, runner, create_config_file, raw_config):
        raw_config['components'] = {'webmail': True, 'postfix': False}
        path = create_config_file(raw_config)
        result = runner.invoke(cli, ['build', str(path)])
        assert result.exit_code != 0

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert 'mailubuilder' in result.output
