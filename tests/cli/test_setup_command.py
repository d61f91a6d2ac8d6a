"""
Tests for the setup command.
"""

import os
import stat
import subprocess
from unittest.mock import MagicMock, patch

import pytest
import responses

from claude_setup.cli.parser import CLI
from claude_setup.core.exceptions import CacheUnavailableError, ChecksumMismatchError
from claude_setup.core.installer import InstalledVersion
from claude_setup.core.paths import get_install_paths
from claude_setup.core.platform import Platform

SETUP = "claude_setup.cli.commands.setup"


@pytest.fixture
def runner_env(isolated_home, temp_dir, monkeypatch):
    """A clean runner: no config file, no action inputs, output files in temp_dir."""
    monkeypatch.chdir(temp_dir)
    for name in ("VERSION", "TARGET", "GITHUB_TOKEN", "MARKETPLACES", "PLUGINS"):
        monkeypatch.delenv(f"INPUT_{name}", raising=False)
    monkeypatch.setenv("GITHUB_OUTPUT", str(temp_dir / "output"))
    monkeypatch.setenv("GITHUB_PATH", str(temp_dir / "path"))
    monkeypatch.setenv("PATH", "/usr/bin")
    return temp_dir


@pytest.fixture
def pipeline(isolated_home):
    """Patch the install pipeline collaborators of the setup command."""
    executable = isolated_home / ".local" / "bin" / "claude"
    installed = InstalledVersion(version="2.0.27 (Claude Code)", path=executable)

    with patch(f"{SETUP}.CacheCoordinator") as coordinator_cls, patch(
        f"{SETUP}.BinaryInstaller"
    ) as installer_cls, patch(
        f"{SETUP}.verify_installation", return_value=installed
    ), patch(f"{SETUP}.PluginManager") as manager_cls, patch(
        f"{SETUP}.setup_git_credentials"
    ) as git_credentials, patch(f"{SETUP}.set_github_token") as set_token:
        pipeline = MagicMock()
        pipeline.coordinator = coordinator_cls.return_value
        pipeline.coordinator_cls = coordinator_cls
        pipeline.installer = installer_cls.return_value
        pipeline.manager = manager_cls.return_value
        pipeline.manager_cls = manager_cls
        pipeline.git_credentials = git_credentials
        pipeline.set_token = set_token
        pipeline.executable = executable
        yield pipeline


def read_outputs(runner_env):
    lines = (runner_env / "output").read_text().splitlines()
    return dict(line.split("=", 1) for line in lines)


class TestSetupCommand:
    """Test the setup command end to end with a patched pipeline."""

    def test_fresh_install(self, runner_env, pipeline):
        pipeline.coordinator.restore.return_value = False

        assert CLI().run(["setup", "--claude-version", "1.0.0"]) == 0

        pipeline.coordinator.restore.assert_called_once_with("1.0.0")
        pipeline.installer.install.assert_called_once_with("1.0.0", target=None)
        pipeline.coordinator.save.assert_called_once_with("1.0.0")
        outputs = read_outputs(runner_env)
        assert outputs["cache-hit"] == "false"
        assert outputs["version"] == "2.0.27 (Claude Code)"
        assert outputs["claude-path"] == str(pipeline.executable)
        assert (runner_env / "path").read_text().strip() == str(pipeline.executable.parent)

    def test_cache_hit_skips_install(self, runner_env, pipeline):
        pipeline.coordinator.restore.return_value = True

        assert CLI().run(["setup"]) == 0

        pipeline.coordinator.restore.assert_called_once_with("latest")
        pipeline.installer.install.assert_not_called()
        pipeline.coordinator.save.assert_not_called()
        assert read_outputs(runner_env)["cache-hit"] == "true"

    def test_no_cache(self, runner_env, pipeline):
        assert CLI().run(["setup", "--no-cache", "--target", "2.0.1"]) == 0

        pipeline.coordinator_cls.assert_not_called()
        pipeline.installer.install.assert_called_once_with("latest", target="2.0.1")
        assert read_outputs(runner_env)["cache-hit"] == "false"

    def test_version_from_action_input(self, runner_env, pipeline, monkeypatch):
        monkeypatch.setenv("INPUT_VERSION", "Stable")
        pipeline.coordinator.restore.return_value = False

        assert CLI().run(["setup"]) == 0

        pipeline.installer.install.assert_called_once_with("stable", target=None)

    def test_install_failure_fails_run(self, runner_env, pipeline):
        pipeline.coordinator.restore.return_value = False
        pipeline.installer.install.side_effect = ChecksumMismatchError("a" * 64, "b" * 64)

        assert CLI().run(["-q", "setup"]) == 1

        pipeline.coordinator.save.assert_not_called()

    def test_plugins_and_marketplaces(self, runner_env, pipeline):
        pipeline.coordinator.restore.return_value = True
        pipeline.manager.add_or_update_marketplaces.return_value = 2
        pipeline.manager.install_plugins.return_value = ["a@m", "b@m"]

        result = CLI().run(
            [
                "setup",
                "--github-token",
                "ghp_secret",
                "--marketplaces",
                "owner/one,owner/two",
                "--plugins",
                "a@m,b@m",
            ]
        )

        assert result == 0
        pipeline.git_credentials.assert_called_once_with("ghp_secret")
        pipeline.set_token.assert_called_once_with("ghp_secret")
        pipeline.manager_cls.assert_called_once_with(executable=str(pipeline.executable))
        pipeline.manager.add_or_update_marketplaces.assert_called_once_with(
            "owner/one,owner/two"
        )
        outputs = read_outputs(runner_env)
        assert outputs["marketplaces_added"] == "2"
        assert outputs["plugins_installed"] == "a@m,b@m"

    def test_no_plugins_skips_plugin_setup(self, runner_env, pipeline):
        pipeline.coordinator.restore.return_value = True

        assert CLI().run(["setup", "--github-token", "ghp_secret"]) == 0

        pipeline.manager_cls.assert_not_called()
        pipeline.git_credentials.assert_not_called()


class TestSetupPipeline:
    """Run the setup command through the real installer and cache coordinator."""

    @pytest.fixture
    def host(self):
        linux = Platform(os="linux", arch="x64", platform_id="linux-x64")
        with patch("claude_setup.core.context.detect_platform", return_value=linux):
            yield linux

    @pytest.fixture
    def bucket(self, runner_env, bucket_url, binary_payload):
        content, checksum = binary_payload
        (runner_env / "claude-setup.yaml").write_text(
            f'bucket_url: "{bucket_url}"\n'
            f'download_dir: "{runner_env / "downloads"}"\n'
        )
        with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
            rsps.add(responses.GET, f"{bucket_url}/stable", body="2.0.27\n")
            rsps.add(
                responses.GET,
                f"{bucket_url}/2.0.27/manifest.json",
                json={"platforms": {"linux-x64": {"checksum": checksum}}},
            )
            rsps.add(
                responses.GET, f"{bucket_url}/2.0.27/linux-x64/claude", body=content
            )
            yield rsps

    @pytest.fixture
    def installer_run(self):
        """Record the installer subprocess invocation."""
        seen = {}

        def fake_run(command, check):
            seen["args"] = command[1:]
            seen["mode"] = stat.S_IMODE(os.stat(command[0]).st_mode)
            return subprocess.CompletedProcess(command, 0)

        with patch("claude_setup.core.installer.subprocess.run", side_effect=fake_run):
            yield seen

    @pytest.fixture
    def backend(self, isolated_home):
        installed = InstalledVersion(
            version="2.0.27", path=get_install_paths(isolated_home).executable
        )
        with patch(f"{SETUP}.LocalCacheBackend") as backend_cls, patch(
            f"{SETUP}.verify_installation", return_value=installed
        ):
            yield backend_cls.return_value

    def test_pinned_version_end_to_end(
        self, runner_env, host, bucket, installer_run, backend, isolated_home
    ):
        backend.restore.return_value = None

        assert CLI().run(["setup", "--claude-version", "1.0.0"]) == 0

        assert installer_run == {"args": ["install"], "mode": 0o755}
        assert list((runner_env / "downloads").iterdir()) == []
        backend.save.assert_called_once_with(
            get_install_paths(isolated_home).cache_paths(),
            "claude-code-v2-linux-x64-1.0.0",
        )

    def test_restore_failure_still_installs(
        self, runner_env, host, bucket, installer_run, backend
    ):
        backend.restore.side_effect = CacheUnavailableError("cache service down")

        assert CLI().run(["setup", "--claude-version", "1.0.0"]) == 0

        assert installer_run["args"] == ["install"]
        assert read_outputs(runner_env)["cache-hit"] == "false"
