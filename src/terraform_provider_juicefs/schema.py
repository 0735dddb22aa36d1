"""Typed schemas and state models for the JuiceFS provider.

Every attribute the host orchestrator sees is declared here once, together
with the pydantic models that carry configuration and state between the host
and the resource/data source handlers.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .diagnostics import Diagnostics

VALID_STORAGES = ["file", "mem", "redis", "s3", "sftp", "wasb", "webdav"]

AttributeType = Literal["string", "bool", "list(string)", "map(string)"]


class Attribute(BaseModel):
    """Declaration of one schema attribute."""

    type: AttributeType
    description: str = ""
    required: bool = False
    optional: bool = False
    computed: bool = False
    sensitive: bool = False
    requires_replace: bool = False


class Schema(BaseModel):
    """Attribute set for a provider, resource or data source."""

    version: int = 0
    description: str = ""
    attributes: Dict[str, Attribute] = Field(default_factory=dict)

    def required_attributes(self) -> List[str]:
        return [name for name, attr in self.attributes.items() if attr.required]

    def replace_attributes(self) -> List[str]:
        return [
            name for name, attr in self.attributes.items() if attr.requires_replace
        ]

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def storage_error(value: Any) -> Optional[str]:
    """Return the user-facing complaint for an unsupported storage, if any."""
    if value not in VALID_STORAGES:
        return f"storage {value} is not supported"
    return None


def validate_storage(value: Any) -> Diagnostics:
    """Plan-time validator for the ``storage`` attribute."""
    diags = Diagnostics()
    message = storage_error(value)
    if message:
        diags.add_error("validation failed", message, attribute="storage")
    return diags


PROVIDER_SCHEMA = Schema(
    attributes={
        "dummy": Attribute(type="string", optional=True, computed=True),
    }
)

FORMAT_SCHEMA = Schema(
    description="Formats a JuiceFS volume by binding a metadata engine to object storage.",
    attributes={
        "id": Attribute(type="string", computed=True),
        "additional_params": Attribute(
            type="list(string)",
            description="Additional parameters to pass to the JuiceFS command",
            optional=True,
        ),
        "force": Attribute(
            type="bool",
            description="Force overwriting existing images",
            optional=True,
        ),
        "environment": Attribute(
            type="map(string)",
            description="Environment variables",
            optional=True,
        ),
        "triggers": Attribute(
            type="map(string)",
            description="Values that, when changed, trigger an update of this resource",
            optional=True,
            requires_replace=True,
        ),
        "storage": Attribute(
            type="string",
            description="Storage to use (--storage parameter). Supported are: "
            + ", ".join(VALID_STORAGES),
            required=True,
        ),
        "bucket": Attribute(
            type="string",
            description="The bucket URL to use",
            optional=True,
        ),
        "azure_storage_endpoint_suffix_fix": Attribute(
            type="bool",
            description="It may be necessary to use '*.core.windows.net' instead of "
            "'*.blob.core.windows.net'. This parameter does just that.",
            optional=True,
        ),
        "metadata_uri": Attribute(
            type="string",
            description="Metadata engine to use (for example redis://localhost/1)",
            required=True,
        ),
        "storage_name": Attribute(
            type="string",
            description="Storage name",
            required=True,
        ),
    },
)

VERSION_SCHEMA = Schema(
    description="Reports the version of the installed JuiceFS.",
    attributes={
        "version": Attribute(
            type="string",
            description="Version of installed JuiceFS",
            computed=True,
        ),
    },
)


class ProviderConfigModel(BaseModel):
    """Provider-level configuration. Nothing is required."""

    dummy: Optional[str] = None

    model_config = {"extra": "forbid"}


class FormatModel(BaseModel):
    """Configuration and state of one ``juicefs_format`` resource.

    Optional attributes stay ``None`` when unset so the persisted state
    matches the configuration the host sent.
    """

    id: Optional[str] = None
    additional_params: Optional[List[str]] = None
    environment: Optional[Dict[str, str]] = None
    triggers: Optional[Dict[str, str]] = None
    force: Optional[bool] = None
    storage: str
    bucket: Optional[str] = None
    metadata_uri: str
    storage_name: str
    azure_storage_endpoint_suffix_fix: Optional[bool] = None

    model_config = {"extra": "forbid"}

    @field_validator("storage")
    @classmethod
    def _supported_storage(cls, value: str) -> str:
        message = storage_error(value)
        if message:
            raise ValueError(message)
        return value

    @field_validator("metadata_uri", "storage_name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("value cannot be empty")
        return value

    def to_state(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class VersionModel(BaseModel):
    """State of the ``juicefs_version`` data source."""

    version: str
