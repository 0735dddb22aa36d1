"""Tests for the stdio host adapter."""

import io
import json

from conftest import RecordingCommands
from terraform_provider_juicefs.provider import Provider
from terraform_provider_juicefs.server import ProviderServer


def _serve(server, *requests):
    stdin = io.StringIO("".join(json.dumps(r) + "\n" for r in requests))
    stdout = io.StringIO()
    assert server.serve(stdin, stdout) == 0
    return [json.loads(line) for line in stdout.getvalue().splitlines()]


def test_configure_and_create(provider, commands, format_config):
    responses = _serve(
        ProviderServer(provider),
        {"id": 1, "method": "configure", "config": {}},
        {"id": 2, "method": "create_resource", "type": "juicefs_format", "config": format_config},
    )
    assert responses[0] == {"id": 1, "state": None, "diagnostics": []}
    assert responses[1]["id"] == 2
    assert responses[1]["diagnostics"] == []
    assert responses[1]["state"]["metadata_uri"] == "redis://localhost/1"
    assert commands.calls[0] == ["--version"]
    assert commands.calls[1][0] == "format"


def test_update_and_delete_round_trip(provider, commands, format_config):
    server = ProviderServer(provider)
    created = server.handle(
        {"id": 1, "method": "create_resource", "type": "juicefs_format", "config": format_config}
    )
    updated = server.handle(
        {
            "id": 2,
            "method": "update_resource",
            "type": "juicefs_format",
            "planned_state": {**format_config, "force": True},
            "prior_state": created["state"],
        }
    )
    assert updated["state"]["id"] == created["state"]["id"]
    assert updated["state"]["force"] is True

    calls = len(commands.calls)
    deleted = server.handle(
        {"id": 3, "method": "delete_resource", "type": "juicefs_format", "state": updated["state"]}
    )
    assert deleted["state"] is None
    assert len(commands.calls) == calls


def test_configure_failure_is_reported_not_fatal(format_config):
    server = ProviderServer(Provider(commands=RecordingCommands(returncode=1)))
    responses = _serve(
        server,
        {"id": 1, "method": "configure"},
        {"id": 2, "method": "get_schema"},
    )
    assert responses[0]["diagnostics"][0]["summary"] == "Provider self-check failed"
    assert "juicefs_format" in responses[1]["state"]["resource_schemas"]


def test_validate_resource_config(provider):
    response = ProviderServer(provider).handle(
        {
            "id": 1,
            "method": "validate_resource_config",
            "type": "juicefs_format",
            "config": {"storage": "ceph", "metadata_uri": "m", "storage_name": "n"},
        }
    )
    assert response["diagnostics"][0]["detail"] == "storage ceph is not supported"


def test_read_data_source(provider):
    response = ProviderServer(provider).handle(
        {"id": 9, "method": "read_data_source", "type": "juicefs_version"}
    )
    assert response == {"id": 9, "state": {"version": "1.2.3+2024-05-01.abcdef"}, "diagnostics": []}


def test_import_and_read(provider):
    server = ProviderServer(provider)
    imported = server.handle(
        {"id": 1, "method": "import_resource", "type": "juicefs_format", "id_to_import": "abc"}
    )
    read = server.handle(
        {"id": 2, "method": "read_resource", "type": "juicefs_format", "state": imported["state"]}
    )
    assert read["state"] == {"id": "abc"}


def test_errors_keep_serving(provider):
    server = ProviderServer(provider)
    stdin = io.StringIO(
        "not json\n"
        "\n"
        + json.dumps({"id": 2, "method": "explode"}) + "\n"
        + json.dumps({"id": 3, "method": "create_resource", "type": "nope"}) + "\n"
        + json.dumps({"id": 4, "method": "stop"}) + "\n"
        + json.dumps({"id": 5, "method": "get_schema"}) + "\n"
    )
    stdout = io.StringIO()
    server.serve(stdin, stdout)
    responses = [json.loads(line) for line in stdout.getvalue().splitlines()]

    assert [r.get("id") for r in responses] == [None, 2, 3, 4]
    assert responses[0]["diagnostics"][0]["summary"] == "Malformed request"
    assert responses[1]["diagnostics"][0]["summary"] == "Unknown method"
    assert responses[2]["diagnostics"][0]["detail"] == "unknown resource type 'nope'"
    assert server.stopped
