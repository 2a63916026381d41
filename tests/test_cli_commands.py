"""Tests for the secret and project CLI commands."""
import json
from unittest import mock

import pytest

from bitwarden_secrets.cli import main as cli
from bitwarden_secrets.provider.domains.bws_client import BwsClient
from bitwarden_secrets.provider.domains.errors import ExecutionError
from bitwarden_secrets.provider.workflows.provider import ProviderSession

SECRET = {
    "id": "s1",
    "organizationId": "o1",
    "projectId": "p1",
    "key": "API_KEY",
    "value": "abc123",
    "note": "",
    "creationDate": "t0",
    "revisionDate": "t0",
}


@pytest.fixture
def client(monkeypatch):
    """Patch the CLI session so commands run against a fake bws client."""
    fake = mock.create_autospec(BwsClient, instance=True)
    fake.execute.return_value = json.dumps(SECRET).encode()
    monkeypatch.setattr(cli, "_session", lambda: ProviderSession(fake))
    return fake


class TestSecretCommands:
    """Test `bws-provider secret ...`."""

    def test_get_masks_value(self, client, capsys):
        cli.main(["secret", "get", "s1"])

        output = json.loads(capsys.readouterr().out)
        assert output["id"] == "s1"
        assert output["value"] == "********"
        client.execute.assert_called_once_with(["secret", "get", "s1"])

    def test_get_reveal(self, client, capsys):
        cli.main(["secret", "get", "s1", "--reveal"])

        assert json.loads(capsys.readouterr().out)["value"] == "abc123"

    def test_list(self, client, capsys):
        client.execute.return_value = json.dumps([SECRET, {**SECRET, "id": "s2"}]).encode()

        cli.main(["secret", "list"])

        output = json.loads(capsys.readouterr().out)
        assert [s["id"] for s in output] == ["s1", "s2"]

    def test_create(self, client, capsys):
        cli.main(["secret", "create", "--project-id", "p1", "--key", "API_KEY", "--value", "abc123"])

        client.execute.assert_called_once_with(["secret", "create", "--note", "", "API_KEY", "abc123", "p1"])
        assert "abc123" not in capsys.readouterr().out

    def test_edit_only_sends_given_flags(self, client):
        cli.main(["secret", "edit", "s1", "--value", "new"])

        client.execute.assert_called_once_with(["secret", "edit", "--value", "new", "--note", "", "s1"])

    def test_delete(self, client, capsys):
        cli.main(["secret", "delete", "s1"])

        client.execute.assert_called_once_with(["secret", "delete", "s1"])
        assert "Deleted secret s1" in capsys.readouterr().out

    def test_bws_error_exits_1(self, client, capsys):
        client.execute.side_effect = ExecutionError("not found", returncode=1)

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["secret", "get", "missing"])

        assert exc_info.value.code == 1
        assert "Error: execution: not found" in capsys.readouterr().err

    def test_invalid_identifier_exits_2(self, client):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["secret", "get", "has space"])

        assert exc_info.value.code == 2
        client.execute.assert_not_called()

    def test_blank_key_exits_2(self, client):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["secret", "create", "--project-id", "p1", "--key", " ", "--value", "v"])

        assert exc_info.value.code == 2


class TestProjectCommands:
    """Test `bws-provider project ...`."""

    @pytest.fixture(autouse=True)
    def project_output(self, client):
        client.execute.return_value = json.dumps({
            "id": "p1",
            "organizationId": "o1",
            "name": "backend",
            "creationDate": "t0",
            "revisionDate": "t0",
        }).encode()

    def test_create(self, client, capsys):
        cli.main(["project", "create", "backend"])

        client.execute.assert_called_once_with(["project", "create", "backend"])
        assert json.loads(capsys.readouterr().out)["name"] == "backend"

    def test_edit(self, client):
        cli.main(["project", "edit", "p1", "--name", "renamed"])

        client.execute.assert_called_once_with(["project", "edit", "--name", "renamed", "p1"])

    def test_get(self, client):
        cli.main(["project", "get", "p1"])

        client.execute.assert_called_once_with(["project", "get", "p1"])


class TestMain:
    """Test top-level routing."""

    def test_no_command_exits_2(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])

        assert exc_info.value.code == 2

    def test_missing_subcommand_exits_2(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["secret"])

        assert exc_info.value.code == 2

    def test_version(self, capsys):
        cli.main(["version"])

        assert "bitwarden-secrets-provider 0.1.0" in capsys.readouterr().out
