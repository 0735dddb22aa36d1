"""Local state file and plan/apply flow for running the provider without a host."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

import yaml

from .diagnostics import Diagnostics
from .format import FormatResource
from .provider import Provider
from .results import ResourceResult
from .schema import FORMAT_SCHEMA

logger = logging.getLogger(__name__)

STATE_VERSION = 1

PlanAction = Literal["create", "update", "replace", "noop"]


class StateFileError(RuntimeError):
    """The local state file is unreadable or has an unexpected shape."""


def load_state(path: Path) -> Dict[str, Any]:
    """Load and normalize a state file; a missing file is an empty state."""
    if not path.exists():
        return {"version": STATE_VERSION, "resources": {}}

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise StateFileError(f"Failed to parse state at {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise StateFileError(f"State file {path} must contain a mapping")

    version = data.get("version")
    if version not in (None, STATE_VERSION):
        raise StateFileError(
            f"Unsupported state version ({version}). Expected version {STATE_VERSION} at {path}."
        )

    data.setdefault("version", STATE_VERSION)
    if data.get("resources") is None:
        data["resources"] = {}
    return data


def save_state(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")


def load_resource_config(path: Path) -> Dict[str, Any]:
    """Read a YAML file holding the attributes of one juicefs_format resource."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise RuntimeError(f"Failed to parse config at {path}: {exc}") from exc
    if not data:
        raise RuntimeError(f"Config file {path} is empty")
    if not isinstance(data, dict):
        raise RuntimeError(f"Config file {path} must contain a mapping")
    return data


def _plan_value(value: Any) -> Any:
    # unset and empty or false values are the same to the host's diff
    if value is None or value is False or value == "" or value == [] or value == {}:
        return None
    return value


def plan_action(
    prior: Optional[Mapping[str, Any]], config: Mapping[str, Any]
) -> PlanAction:
    """Decide what the host would do for ``config`` given the stored state."""
    if prior is None:
        return "create"

    for name in FORMAT_SCHEMA.replace_attributes():
        if _plan_value(prior.get(name)) != _plan_value(config.get(name)):
            return "replace"

    for name, attr in FORMAT_SCHEMA.attributes.items():
        if attr.computed and not attr.optional:
            continue
        if _plan_value(prior.get(name)) != _plan_value(config.get(name)):
            return "update"
    return "noop"


def apply_config(
    provider: Provider, name: str, config: Mapping[str, Any], path: Path
) -> Tuple[Optional[PlanAction], ResourceResult]:
    """Plan and apply one resource against the state file at ``path``.

    Returns the action taken (``None`` when the configuration is invalid)
    and the operation result. State is only written for successful
    operations, except that a failed replacement leaves the resource absent.
    """
    resource = provider.resource(FormatResource.type_name)
    config = {k: v for k, v in config.items() if k != "id"}

    diags = resource.validate_config(config)
    if diags.has_error():
        return None, ResourceResult(diagnostics=diags)

    data = load_state(path)
    entry = data["resources"].get(name)
    prior = entry.get("state") if entry else None
    action = plan_action(prior, config)
    logger.info("%s: %s", name, action)

    if action == "noop":
        result = resource.read(prior or {})
    elif action == "create":
        result = resource.create(config)
    elif action == "replace":
        resource.delete(prior)
        data["resources"].pop(name, None)
        result = resource.create(config)
    else:
        result = resource.update(config, prior or {})

    if result.ok and result.state is not None:
        data["resources"][name] = {
            "type": FormatResource.type_name,
            "state": result.state,
        }
    if result.ok or action == "replace":
        save_state(path, data)
    return action, result


def destroy(provider: Provider, name: str, path: Path) -> ResourceResult:
    data = load_state(path)
    entry = data["resources"].get(name)
    if entry is None:
        diags = Diagnostics()
        diags.add_error("Resource not found", f"'{name}' is not in state {path}")
        return ResourceResult(diagnostics=diags)

    resource = provider.resource(entry.get("type") or FormatResource.type_name)
    result = resource.delete(entry.get("state"))
    if result.ok:
        data["resources"].pop(name)
        save_state(path, data)
    return result
