"""
Tests for marketplace management and plugin installation.
"""

import json
import subprocess
from unittest.mock import call, patch

import pytest

from claude_setup.core.exceptions import PluginCommandError, ValidationError
from claude_setup.plugins.marketplace import (
    MarketplaceInfo,
    PluginManager,
    parse_list,
    set_github_token,
)

RUN = "claude_setup.plugins.marketplace.subprocess.run"


def completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess([], returncode, stdout=stdout, stderr=stderr)


class TestParseList:
    """Tests for parse_list()."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("item1,item2,item3", ["item1", "item2", "item3"]),
            ("item1\nitem2\nitem3", ["item1", "item2", "item3"]),
            ("item1,item2\nitem3\nitem4,item5", ["item1", "item2", "item3", "item4", "item5"]),
            ("  item1  ,  item2  \n  item3  ", ["item1", "item2", "item3"]),
            ("item1,,\n\nitem2,,,\n\n\nitem3", ["item1", "item2", "item3"]),
            ("single-plugin@marketplace", ["single-plugin@marketplace"]),
            ("", []),
            ("   ,  ,  ", []),
            (None, []),
        ],
    )
    def test_parse(self, text, expected):
        assert parse_list(text) == expected


class TestGithubToken:
    """Tests for set_github_token()."""

    def test_sets_token(self):
        environ = {}
        set_github_token("ghp_secret", environ)
        assert environ == {"GITHUB_TOKEN": "ghp_secret"}


class TestListMarketplaces:
    """Tests for PluginManager.list_marketplaces()."""

    def test_list_format(self):
        listing = [
            {"name": "tools", "source": {"source": "github", "repo": "owner/tools"}},
            {"name": "local", "source": {"source": "directory", "path": "./local"}},
        ]
        with patch(RUN, return_value=completed(stdout=json.dumps(listing))) as mock_run:
            marketplaces = PluginManager().list_marketplaces()

        assert marketplaces == [MarketplaceInfo(name="tools", repo="owner/tools")]
        assert mock_run.call_args[0][0] == [
            "claude", "plugin", "marketplace", "list", "--json"
        ]

    def test_object_format(self):
        listing = {"marketplaces": [{"name": "tools", "repo": "owner/tools"}]}
        with patch(RUN, return_value=completed(stdout=json.dumps(listing))):
            marketplaces = PluginManager().list_marketplaces()

        assert marketplaces == [MarketplaceInfo(name="tools", repo="owner/tools")]

    @pytest.mark.parametrize(
        "result",
        [completed(returncode=1, stderr="boom"), completed(stdout="not json"), completed()],
    )
    def test_unavailable_listing_is_empty(self, result):
        with patch(RUN, return_value=result):
            assert PluginManager().list_marketplaces() == []

    def test_missing_executable_is_empty(self):
        with patch(RUN, side_effect=FileNotFoundError("claude")):
            assert PluginManager().list_marketplaces() == []


class TestAddOrUpdateMarketplace:
    """Tests for PluginManager.add_or_update_marketplace()."""

    def test_add_new_github_marketplace(self):
        with patch(RUN, side_effect=[completed(stdout="[]"), completed()]) as mock_run:
            assert PluginManager().add_or_update_marketplace("owner/repo") is True

        assert mock_run.call_count == 2
        assert mock_run.call_args_list[1] == call(
            ["claude", "plugin", "marketplace", "add", "owner/repo"], check=False
        )

    def test_update_existing_marketplace(self):
        listing = json.dumps([{"name": "repo-market", "repo": "owner/repo"}])
        with patch(RUN, side_effect=[completed(stdout=listing), completed()]) as mock_run:
            assert PluginManager().add_or_update_marketplace("owner/repo") is False

        assert mock_run.call_args_list[1] == call(
            ["claude", "plugin", "marketplace", "update", "repo-market"], check=False
        )

    def test_url_source_is_always_added(self):
        source = "https://gitlab.com/company/plugins.git"
        with patch(RUN, return_value=completed()) as mock_run:
            assert PluginManager().add_or_update_marketplace(source) is True

        mock_run.assert_called_once_with(
            ["claude", "plugin", "marketplace", "add", source], check=False
        )

    def test_invalid_source_runs_nothing(self):
        with patch(RUN) as mock_run:
            with pytest.raises(ValidationError, match="Invalid marketplace source"):
                PluginManager().add_or_update_marketplace("malicious/../../../etc/passwd")

        mock_run.assert_not_called()

    def test_command_failure(self):
        with patch(RUN, side_effect=[completed(stdout="[]"), completed(returncode=1)]):
            with pytest.raises(PluginCommandError, match="exit code 1"):
                PluginManager().add_or_update_marketplace("owner/repo")

    def test_uses_given_executable(self):
        with patch(RUN, return_value=completed()) as mock_run:
            PluginManager("/home/runner/.local/bin/claude").add_or_update_marketplace(
                "./local"
            )

        assert mock_run.call_args[0][0][0] == "/home/runner/.local/bin/claude"


class TestAddOrUpdateMarketplaces:
    """Tests for PluginManager.add_or_update_marketplaces()."""

    def test_counts_processed(self):
        with patch.object(
            PluginManager, "add_or_update_marketplace", side_effect=[True, False]
        ):
            assert PluginManager().add_or_update_marketplaces("a/b\nc/d") == 2

    def test_empty_list(self):
        with patch(RUN) as mock_run:
            assert PluginManager().add_or_update_marketplaces(" , ") == 0

        mock_run.assert_not_called()

    def test_stops_at_first_failure(self):
        with patch.object(
            PluginManager,
            "add_or_update_marketplace",
            side_effect=[True, PluginCommandError("failed")],
        ) as mock_add:
            with pytest.raises(PluginCommandError):
                PluginManager().add_or_update_marketplaces("a/b,c/d,e/f")

        assert mock_add.call_count == 2


class TestInstallPlugins:
    """Tests for PluginManager.install_plugins()."""

    def test_install_all(self):
        with patch(RUN, return_value=completed()) as mock_run:
            installed = PluginManager().install_plugins(
                "plugin1@marketplace,plugin2@marketplace,plugin3@marketplace"
            )

        assert installed == ["plugin1@marketplace", "plugin2@marketplace", "plugin3@marketplace"]
        assert mock_run.call_count == 3

    def test_invalid_name_runs_nothing(self):
        with patch(RUN) as mock_run:
            with pytest.raises(ValidationError, match="contains disallowed characters"):
                PluginManager().install_plugins("plugin;rm -rf /")

        mock_run.assert_not_called()

    def test_fails_fast_on_first_invalid(self):
        with patch(RUN, return_value=completed()) as mock_run:
            with pytest.raises(ValidationError, match="path traversal detected"):
                PluginManager().install_plugins("valid-plugin,../malicious,another-valid")

        mock_run.assert_called_once_with(
            ["claude", "plugin", "install", "valid-plugin"], check=False
        )

    def test_empty_list(self):
        assert PluginManager().install_plugins("") == []

    def test_command_failure(self):
        with patch(RUN, return_value=completed(returncode=2)):
            with pytest.raises(PluginCommandError, match="exit code 2"):
                PluginManager().install_plugins("plugin@marketplace")

    def test_missing_executable(self):
        with patch(RUN, side_effect=FileNotFoundError("claude")):
            with pytest.raises(PluginCommandError, match="Failed to run claude"):
                PluginManager().install_plugins("plugin@marketplace")
