"""The ``juicefs_format`` resource.

Create and Update both run ``juicefs format``; the wrapped binary treats a
repeated format of the same volume as an in-place settings update. Delete
only drops the resource from state since JuiceFS has no unformat command.
Read returns the stored state unchanged because nothing can be queried to
detect drift.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from .commands import JuiceFSCommandError, JuiceFSCommands
from .diagnostics import Diagnostics, diagnostics_from_validation_error
from .results import ResourceResult
from .schema import FORMAT_SCHEMA, FormatModel, Schema, validate_storage

logger = logging.getLogger(__name__)

AZURE_BLOB_SUFFIX = ".blob.core.windows.net"
AZURE_CORE_SUFFIX = ".core.windows.net"


def apply_azure_suffix_fix(bucket: Optional[str], enabled: Optional[bool]) -> Optional[str]:
    """Swap the first blob endpoint suffix for the core one when enabled."""
    if not enabled or not bucket:
        return bucket
    return bucket.replace(AZURE_BLOB_SUFFIX, AZURE_CORE_SUFFIX, 1)


def build_format_args(model: FormatModel) -> List[str]:
    """Assemble the ``juicefs format`` argument list in its fixed order."""
    args = ["format", "--storage", model.storage]
    bucket = apply_azure_suffix_fix(model.bucket, model.azure_storage_endpoint_suffix_fix)
    if bucket:
        args.extend(["--bucket", bucket])
    if model.force:
        args.append("--force")
    args.extend(model.additional_params or [])
    args.extend([model.metadata_uri, model.storage_name])
    return args


def _parse_model(
    data: Optional[Mapping[str, Any]], what: str
) -> Tuple[Optional[FormatModel], Diagnostics]:
    if data is None:
        diags = Diagnostics()
        diags.add_error("Missing " + what, f"no {what} was provided")
        return None, diags
    try:
        return FormatModel.model_validate(dict(data)), Diagnostics()
    except ValidationError as exc:
        return None, diagnostics_from_validation_error(exc)


class FormatResource:
    type_name = "juicefs_format"

    def __init__(self, commands: Optional[JuiceFSCommands] = None):
        self.commands = commands or JuiceFSCommands()

    def schema(self) -> Schema:
        return FORMAT_SCHEMA

    def validate_config(self, config: Mapping[str, Any]) -> Diagnostics:
        """Plan-time validation; never reaches the subprocess."""
        diags = Diagnostics()
        if "storage" in config and config["storage"] is not None:
            diags.extend(validate_storage(config["storage"]))
            if diags.has_error():
                return diags
        _, parse_diags = _parse_model(config, "configuration")
        diags.extend(parse_diags)
        return diags

    def juicefs_format(self, model: FormatModel) -> None:
        args = build_format_args(model)
        logger.info(
            "formatting %s on %s (storage=%s)",
            model.storage_name,
            model.metadata_uri,
            model.storage,
        )
        self.commands.run_checked(args, env=model.environment or {})

    def _run_format(self, model: FormatModel, diags: Diagnostics) -> bool:
        try:
            self.juicefs_format(model)
        except JuiceFSCommandError as exc:
            diags.add_error("Failed to run juicefs init", str(exc))
            return False
        return True

    def create(self, config: Mapping[str, Any]) -> ResourceResult:
        model, diags = _parse_model(config, "configuration")
        if model is None:
            return ResourceResult(diagnostics=diags)

        if not self._run_format(model, diags):
            return ResourceResult(diagnostics=diags)

        if not model.id:
            model.id = str(uuid.uuid4())
        logger.info("created juicefs_format %s", model.id)
        return ResourceResult(state=model.to_state(), diagnostics=diags)

    def read(self, state: Mapping[str, Any]) -> ResourceResult:
        return ResourceResult(state=dict(state))

    def update(
        self, plan: Mapping[str, Any], prior_state: Mapping[str, Any]
    ) -> ResourceResult:
        model, diags = _parse_model(plan, "plan")
        if model is None:
            return ResourceResult(state=dict(prior_state), diagnostics=diags)

        if not self._run_format(model, diags):
            return ResourceResult(state=dict(prior_state), diagnostics=diags)

        model.id = prior_state.get("id") or model.id or str(uuid.uuid4())
        logger.info("updated juicefs_format %s", model.id)
        return ResourceResult(state=model.to_state(), diagnostics=diags)

    def delete(self, state: Optional[Mapping[str, Any]] = None) -> ResourceResult:
        if state:
            logger.info("removing juicefs_format %s from state", state.get("id"))
        return ResourceResult(state=None)

    def import_state(self, resource_id: str) -> ResourceResult:
        diags = Diagnostics()
        if not resource_id:
            diags.add_error("Invalid import ID", "an import ID must not be empty")
            return ResourceResult(diagnostics=diags)
        return ResourceResult(state={"id": resource_id})
