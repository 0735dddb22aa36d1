import subprocess
from typing import Dict, List

import pytest

from terraform_provider_juicefs.commands import JuiceFSCommands
from terraform_provider_juicefs.config import ProviderSettings
from terraform_provider_juicefs.provider import Provider


class RecordingCommands(JuiceFSCommands):
    """Stub collaborator that records invocations instead of spawning processes."""

    def __init__(self, output: str = "", returncode: int = 0):
        super().__init__(self_command=["provider-under-test"])
        self.output = output
        self.returncode = returncode
        self.calls: List[List[str]] = []
        self.envs: List[Dict[str, str]] = []

    def run(self, args, env=None) -> subprocess.CompletedProcess:
        self.calls.append(list(args))
        self.envs.append(dict(env or {}))
        return subprocess.CompletedProcess(
            self.build_command(args), self.returncode, stdout=self.output
        )


@pytest.fixture
def commands():
    return RecordingCommands(output="juicefs version 1.2.3+2024-05-01.abcdef\n")


@pytest.fixture
def failing_commands():
    return RecordingCommands(output="format: bucket not reachable\n", returncode=1)


@pytest.fixture
def provider(commands):
    return Provider(commands=commands, settings=ProviderSettings())


@pytest.fixture
def format_config():
    return {
        "storage": "s3",
        "bucket": "https://mybucket.s3.amazonaws.com",
        "metadata_uri": "redis://localhost/1",
        "storage_name": "myjfs",
    }


@pytest.fixture
def mock_cli_commands(mocker, commands):
    """
    Routes every JuiceFSCommands built by the CLI through the recording stub.
    """
    mocker.patch(
        "terraform_provider_juicefs.provider.JuiceFSCommands",
        return_value=commands,
    )
    return commands

