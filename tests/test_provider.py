"""Tests for the provider root and its self-check."""

import pytest

from conftest import RecordingCommands
from terraform_provider_juicefs.config import ProviderSettings
from terraform_provider_juicefs.format import FormatResource
from terraform_provider_juicefs.provider import Provider, ProviderStartupError
from terraform_provider_juicefs.version import VersionDataSource


def test_registers_one_resource_and_one_data_source(provider):
    assert list(provider.resources()) == ["juicefs_format"]
    assert list(provider.data_sources()) == ["juicefs_version"]
    assert isinstance(provider.resource("juicefs_format"), FormatResource)
    assert isinstance(provider.data_source("juicefs_version"), VersionDataSource)


def test_unknown_types_raise_key_error(provider):
    with pytest.raises(KeyError):
        provider.resource("juicefs_mount")
    with pytest.raises(KeyError):
        provider.data_source("juicefs_status")


def test_schema_shape(provider):
    schema = provider.get_schema()
    assert schema["provider"]["attributes"]["dummy"]["optional"] is True
    fmt = schema["resource_schemas"]["juicefs_format"]["attributes"]
    assert {name for name, a in fmt.items() if a["required"]} == {
        "storage",
        "metadata_uri",
        "storage_name",
    }
    assert fmt["id"]["computed"] is True
    assert fmt["triggers"]["requires_replace"] is True
    assert "file, mem, redis, s3, sftp, wasb, webdav" in fmt["storage"]["description"]
    version = schema["data_source_schemas"]["juicefs_version"]["attributes"]
    assert version["version"]["computed"] is True


def test_configure_runs_version_self_check(provider, commands):
    diags = provider.configure({})
    assert not diags.has_error()
    assert provider.configured
    assert commands.calls == [["--version"]]


def test_configure_self_check_failure_is_diagnostic():
    provider = Provider(commands=RecordingCommands(output="not found", returncode=127))
    diags = provider.configure({})
    assert diags.has_error()
    assert diags.errors()[0].summary == "Provider self-check failed"
    assert not provider.configured


def test_configure_skips_self_check_when_disabled():
    commands = RecordingCommands(returncode=1)
    provider = Provider(commands=commands, settings=ProviderSettings(self_check=False))
    assert not provider.configure().has_error()
    assert commands.calls == []


def test_configure_rejects_unknown_attributes(provider, commands):
    diags = provider.configure({"bogus": "x"})
    assert diags.has_error()
    assert commands.calls == []


def test_ensure_configured_raises_typed_error():
    provider = Provider(commands=RecordingCommands(returncode=1))
    with pytest.raises(ProviderStartupError):
        provider.ensure_configured()


def test_ensure_configured_only_once(provider, commands):
    provider.ensure_configured()
    provider.ensure_configured()
    assert len(commands.calls) == 1
