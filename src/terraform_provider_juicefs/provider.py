"""Provider root: schema, self-check and the resource/data source registry."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from .commands import JuiceFSCommandError, JuiceFSCommands
from .config import ProviderSettings
from .diagnostics import Diagnostics, diagnostics_from_validation_error
from .format import FormatResource
from .schema import PROVIDER_SCHEMA, ProviderConfigModel
from .version import VERSION_ARGS, VersionDataSource

logger = logging.getLogger(__name__)

PROVIDER_NAME = "juicefs"


class ProviderStartupError(RuntimeError):
    """The provider could not verify that JuiceFS is runnable."""


class Provider:
    def __init__(
        self,
        commands: Optional[JuiceFSCommands] = None,
        settings: Optional[ProviderSettings] = None,
    ):
        self.settings = settings or ProviderSettings()
        self.commands = commands or JuiceFSCommands()
        self.configured = False
        self._resources: Dict[str, FormatResource] = {
            FormatResource.type_name: FormatResource(self.commands),
        }
        self._data_sources: Dict[str, VersionDataSource] = {
            VersionDataSource.type_name: VersionDataSource(self.commands),
        }

    def get_schema(self) -> Dict[str, Any]:
        return {
            "provider": PROVIDER_SCHEMA.to_dict(),
            "resource_schemas": {
                name: r.schema().to_dict() for name, r in self._resources.items()
            },
            "data_source_schemas": {
                name: d.schema().to_dict() for name, d in self._data_sources.items()
            },
        }

    def resources(self) -> Dict[str, FormatResource]:
        return dict(self._resources)

    def data_sources(self) -> Dict[str, VersionDataSource]:
        return dict(self._data_sources)

    def resource(self, type_name: str) -> FormatResource:
        try:
            return self._resources[type_name]
        except KeyError:
            raise KeyError(f"unknown resource type '{type_name}'") from None

    def data_source(self, type_name: str) -> VersionDataSource:
        try:
            return self._data_sources[type_name]
        except KeyError:
            raise KeyError(f"unknown data source type '{type_name}'") from None

    def self_check(self) -> None:
        """Run ``juicefs --version``; raise ProviderStartupError on failure."""
        try:
            self.commands.run_checked(VERSION_ARGS)
        except JuiceFSCommandError as exc:
            raise ProviderStartupError(f"juicefs self-check failed: {exc}") from exc

    def configure(self, config: Optional[Mapping[str, Any]] = None) -> Diagnostics:
        diags = Diagnostics()
        try:
            ProviderConfigModel.model_validate(dict(config or {}))
        except ValidationError as exc:
            diags.extend(diagnostics_from_validation_error(exc))
            return diags

        if self.settings.self_check:
            try:
                self.self_check()
            except ProviderStartupError as exc:
                logger.error("%s", exc)
                diags.add_error("Provider self-check failed", str(exc))
                return diags

        self.configured = True
        logger.info("provider %s configured", PROVIDER_NAME)
        return diags

    def ensure_configured(self, config: Optional[Mapping[str, Any]] = None) -> None:
        """Configure once, turning any error diagnostic into ProviderStartupError."""
        if self.configured:
            return
        diags = self.configure(config)
        if diags.has_error():
            raise ProviderStartupError("; ".join(str(d) for d in diags.errors()))
