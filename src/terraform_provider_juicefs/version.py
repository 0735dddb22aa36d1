"""The ``juicefs_version`` data source."""

from __future__ import annotations

import logging
from typing import Optional

from .commands import JuiceFSCommandError, JuiceFSCommands
from .diagnostics import Diagnostics
from .results import DataSourceResult
from .schema import VERSION_SCHEMA, Schema, VersionModel

logger = logging.getLogger(__name__)

VERSION_ARGS = ["--version"]


def _strip_prefix(text: str, prefix: str) -> str:
    text = text.strip()
    if text.startswith(prefix):
        text = text[len(prefix) :]
    return text.strip()


def parse_version_output(output: str) -> str:
    """Extract the version from ``juicefs version <value>``."""
    return _strip_prefix(_strip_prefix(output, "juicefs"), "version")


class VersionDataSource:
    type_name = "juicefs_version"

    def __init__(self, commands: Optional[JuiceFSCommands] = None):
        self.commands = commands or JuiceFSCommands()

    def schema(self) -> Schema:
        return VERSION_SCHEMA

    def read(self) -> DataSourceResult:
        diags = Diagnostics()
        try:
            output = self.commands.run_checked(VERSION_ARGS)
        except JuiceFSCommandError as exc:
            diags.add_error("Failed to run juicefs", str(exc))
            return DataSourceResult(diagnostics=diags)

        if not output.strip():
            diags.add_error("Unexpected output", "JuiceFS did not output anything")
            return DataSourceResult(diagnostics=diags)

        model = VersionModel(version=parse_version_output(output))
        logger.info("detected juicefs version %s", model.version)
        return DataSourceResult(state=model.model_dump(), diagnostics=diags)
