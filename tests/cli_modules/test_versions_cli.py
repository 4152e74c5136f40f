"""Tests for the versions CLI commands."""

import json
import logging

import pytest
from typer.testing import CliRunner

from secret_rotation import __version__
from secret_rotation.cli import app
from secret_rotation.config import reset_config
from tests.mocks import MockKMSClient, MockSecretsManagerClient

SECRET = "dev/web3-auth/auth-service-api"


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def runner():
    """Create CLI runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_cli(monkeypatch):
    """Start every invocation from default settings and restore logging after."""
    for name in ("SECRET_ROTATION_CONFIG", "SECRET_ROTATION_KEEP_COUNT", "SECRET_ROTATION_KEEP_DAYS"):
        monkeypatch.delenv(name, raising=False)
    package_logger = logging.getLogger("secret_rotation")
    handlers, level = list(package_logger.handlers), package_logger.level
    reset_config()
    yield
    reset_config()
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)


@pytest.fixture
def sm_client():
    client = MockSecretsManagerClient()
    client.seed(
        SECRET,
        {
            "v-current": ["AWSCURRENT"],
            "v-previous": ["AWSPREVIOUS", "20240104_000000"],
            "v-3": ["20240103_000000"],
            "v-2": ["20240102_000000"],
            "v-1": ["20240101_000000", "keep-me"],
        },
    )
    return client


@pytest.fixture
def boto_calls(monkeypatch, sm_client):
    """Route boto3.client() to the in-memory mocks and record the calls."""
    clients = {"secretsmanager": sm_client, "kms": MockKMSClient()}
    calls = []

    def client_factory(service_name, **kwargs):
        calls.append((service_name, kwargs))
        return clients[service_name]

    monkeypatch.setattr("boto3.client", client_factory)
    return calls


# =============================================================================
# Root App Tests
# =============================================================================


class TestRootApp:
    """Tests for options handled by the root callback."""

    def test_version(self, runner):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"secret-rotation {__version__}" in result.output

    def test_region_override(self, runner, boto_calls):
        result = runner.invoke(app, ["--region", "eu-west-1", "versions", "count", SECRET])
        assert result.exit_code == 0
        assert boto_calls[0][0] == "secretsmanager"
        assert boto_calls[0][1]["region_name"] == "eu-west-1"

    def test_default_region(self, runner, boto_calls, monkeypatch):
        monkeypatch.delenv("AWS_REGION", raising=False)
        monkeypatch.delenv("AWS_DEFAULT_REGION", raising=False)
        runner.invoke(app, ["versions", "count", SECRET])
        assert boto_calls[0][1]["region_name"] == "us-east-2"

    def test_invalid_config_file(self, runner, tmp_path):
        config_file = tmp_path / "rotation.yaml"
        config_file.write_text("keep_count: -1\n")
        result = runner.invoke(app, ["--config", str(config_file), "versions", "count", SECRET])
        assert result.exit_code == 31


# =============================================================================
# List / Count Tests
# =============================================================================


class TestListCommand:
    """Tests for versions list."""

    def test_console(self, runner, boto_calls):
        result = runner.invoke(app, ["versions", "list", SECRET])
        assert result.exit_code == 0
        assert "v-current" in result.output
        assert "CURRENT" in result.output
        assert "7/20" in result.output

    def test_json_order_and_status(self, runner, boto_calls):
        result = runner.invoke(app, ["versions", "list", SECRET, "--format", "json"])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["secret_id"] == SECRET
        assert [v["version_id"] for v in data["versions"]] == [
            "v-current",
            "v-previous",
            "v-3",
            "v-2",
            "v-1",
        ]
        assert [v["status"] for v in data["versions"]] == [
            "CURRENT",
            "PREVIOUS",
            "TIMESTAMPED",
            "TIMESTAMPED",
            "TIMESTAMPED",
        ]
        assert data["usage"]["total_labels"] == 7

    def test_missing_secret(self, runner, boto_calls):
        result = runner.invoke(app, ["versions", "list", "dev/does-not-exist"])
        assert result.exit_code == 40
        assert "Secret not found" in result.output


class TestCountCommand:
    """Tests for versions count."""

    def test_json(self, runner, boto_calls):
        result = runner.invoke(app, ["versions", "count", SECRET, "-f", "json"])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["version_count"] == 5
        assert data["total_labels"] == 7
        assert data["timestamp_labels"] == 4
        assert data["available_slots"] == 13
        assert data["near_limit"] is False

    def test_near_limit_warning(self, runner, boto_calls, sm_client):
        sm_client.seed(
            SECRET,
            {f"v-{i}": [f"202401{i + 1:02d}_000000"] for i in range(18)},
        )
        result = runner.invoke(app, ["versions", "count", SECRET])
        assert result.exit_code == 0
        assert "Approaching label limit" in result.output


# =============================================================================
# Cleanup Tests
# =============================================================================


class TestCleanupCommand:
    """Tests for versions cleanup."""

    def test_force_removes_old_labels(self, runner, boto_calls, sm_client):
        result = runner.invoke(app, ["versions", "cleanup", SECRET, "--keep", "1", "--force"])
        assert result.exit_code == 0
        assert "Removed 2 labels" in result.output

        labels = sm_client.label_map(SECRET)
        assert labels["v-current"] == ["AWSCURRENT"]
        assert labels["v-previous"] == ["AWSPREVIOUS", "20240104_000000"]
        assert labels["v-3"] == ["20240103_000000"]
        assert labels["v-2"] == []
        assert labels["v-1"] == ["keep-me"]

    def test_dry_run(self, runner, boto_calls, sm_client):
        result = runner.invoke(app, ["versions", "cleanup", SECRET, "--keep", "0", "--dry-run"])
        assert result.exit_code == 0
        assert "Cleanup plan" in result.output
        assert "Dry run" in result.output
        assert sm_client.calls_to("update_secret_version_stage") == []

    def test_confirmation_declined(self, runner, boto_calls, sm_client):
        result = runner.invoke(app, ["versions", "cleanup", SECRET, "--keep", "0"], input="n\n")
        assert result.exit_code == 0
        assert "Remove 3 labels" in result.output
        assert "Cleanup cancelled" in result.output
        assert sm_client.calls_to("update_secret_version_stage") == []

    def test_confirmation_accepted(self, runner, boto_calls, sm_client):
        result = runner.invoke(app, ["versions", "cleanup", SECRET, "--keep", "0"], input="y\n")
        assert result.exit_code == 0
        assert len(sm_client.calls_to("update_secret_version_stage")) == 3

    def test_nothing_to_do(self, runner, boto_calls, sm_client):
        result = runner.invoke(app, ["versions", "cleanup", SECRET, "--force"])
        assert result.exit_code == 0
        assert "No cleanup needed" in result.output

    def test_json_result(self, runner, boto_calls):
        result = runner.invoke(
            app, ["versions", "cleanup", SECRET, "--keep", "2", "--force", "--format", "json"]
        )
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["status"] == "completed"
        removed = {r["label"] for r in data["plan"]["labels_to_remove"]}
        assert removed == {"20240101_000000"}

    def test_negative_keep_is_usage_error(self, runner, boto_calls, sm_client):
        result = runner.invoke(app, ["versions", "cleanup", SECRET, "--keep", "-1", "--force"])
        assert result.exit_code == 2
        assert "keep_count must be non-negative" in result.output
        assert sm_client.calls == []

    def test_partial_failure_exit_code(self, runner, boto_calls, sm_client):
        sm_client.failing_removals[("v-2", "20240102_000000")] = "InternalServiceError"
        result = runner.invoke(app, ["versions", "cleanup", SECRET, "--keep", "0", "--force"])
        assert result.exit_code == 60
        assert "1 of 3 label removals failed" in result.output
        assert sm_client.label_map(SECRET)["v-3"] == []

    def test_strict_ignores_days(self, runner, boto_calls, sm_client, monkeypatch):
        monkeypatch.setenv("SECRET_ROTATION_KEEP_DAYS", "100000")
        relaxed = runner.invoke(app, ["versions", "cleanup", SECRET, "--keep", "0", "--dry-run"])
        assert "Nothing to remove" in relaxed.output

        strict = runner.invoke(
            app, ["versions", "cleanup", SECRET, "--keep", "0", "--strict", "--dry-run"]
        )
        assert strict.exit_code == 0
        assert "Dry run" in strict.output


class TestStoreSuppliedText:
    """Labels and version ids are printed as text, never as markup."""

    def test_list_foreign_label_with_brackets(self, runner, boto_calls, sm_client):
        sm_client.seed(SECRET, {"v1": ["AWSCURRENT"], "v0": ["backup[/old]"]})
        result = runner.invoke(app, ["versions", "list", SECRET])
        assert result.exit_code == 0
        assert "backup[/old]" in result.output

    def test_cleanup_plan_version_id_with_brackets(self, runner, boto_calls, sm_client):
        sm_client.seed(SECRET, {"v1": ["AWSCURRENT"], "v[b]": ["20240101_000000"]})
        result = runner.invoke(app, ["versions", "cleanup", SECRET, "--keep", "0", "--dry-run"])
        assert result.exit_code == 0
        assert "v[b]" in result.output

    def test_failure_message_with_brackets(self, runner, boto_calls, sm_client):
        sm_client.seed(SECRET, {"v1": ["AWSCURRENT"], "v0": ["20240101_000000"]})
        sm_client.failing_removals[("v0", "20240101_000000")] = "Throttling[/x]"
        result = runner.invoke(app, ["versions", "cleanup", SECRET, "--keep", "0", "--force"])
        assert result.exit_code == 60
        assert "Throttling[/x]" in result.output


class TestUnlabeledVersions:
    """Versions without labels are reported even when nothing is removed."""

    def test_reported_with_nothing_to_remove(self, runner, boto_calls, sm_client):
        sm_client.seed(SECRET, {"v1": ["AWSCURRENT"], "v-empty": []})
        result = runner.invoke(app, ["versions", "cleanup", SECRET, "--dry-run"])
        assert result.exit_code == 0
        assert "Nothing to remove" in result.output
        assert "Versions left unlabeled (eligible for deletion by AWS): 1" in result.output
        assert "v-empty" in result.output
