"""Serve the provider to a host over stdio.

Each request is one JSON object per line::

    {"id": 1, "method": "create_resource", "type": "juicefs_format", "config": {...}}

and each response is one JSON object per line::

    {"id": 1, "state": {...}, "diagnostics": [...]}

Requests are handled one at a time, in order.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, IO, Optional

from .diagnostics import Diagnostics
from .provider import Provider
from .results import OperationResult

logger = logging.getLogger(__name__)


def _error(summary: str, detail: str = "") -> OperationResult:
    diags = Diagnostics()
    diags.add_error(summary, detail)
    return OperationResult(diagnostics=diags)


def _mapping(request: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = request.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"'{key}' must be an object")
    return value


class ProviderServer:
    def __init__(self, provider: Provider):
        self.provider = provider
        self.stopped = False
        self._methods: Dict[str, Callable[[Dict[str, Any]], OperationResult]] = {
            "get_schema": self._get_schema,
            "configure": self._configure,
            "validate_resource_config": self._validate_resource_config,
            "read_data_source": self._read_data_source,
            "create_resource": self._create_resource,
            "read_resource": self._read_resource,
            "update_resource": self._update_resource,
            "delete_resource": self._delete_resource,
            "import_resource": self._import_resource,
            "stop": self._stop,
        }

    def _get_schema(self, request: Dict[str, Any]) -> OperationResult:
        return OperationResult(state=self.provider.get_schema())

    def _configure(self, request: Dict[str, Any]) -> OperationResult:
        return OperationResult(
            diagnostics=self.provider.configure(_mapping(request, "config"))
        )

    def _validate_resource_config(self, request: Dict[str, Any]) -> OperationResult:
        resource = self.provider.resource(request.get("type", ""))
        return OperationResult(
            diagnostics=resource.validate_config(_mapping(request, "config"))
        )

    def _read_data_source(self, request: Dict[str, Any]) -> OperationResult:
        return self.provider.data_source(request.get("type", "")).read()

    def _create_resource(self, request: Dict[str, Any]) -> OperationResult:
        resource = self.provider.resource(request.get("type", ""))
        return resource.create(_mapping(request, "config"))

    def _read_resource(self, request: Dict[str, Any]) -> OperationResult:
        resource = self.provider.resource(request.get("type", ""))
        return resource.read(_mapping(request, "state"))

    def _update_resource(self, request: Dict[str, Any]) -> OperationResult:
        resource = self.provider.resource(request.get("type", ""))
        return resource.update(
            _mapping(request, "planned_state"), _mapping(request, "prior_state")
        )

    def _delete_resource(self, request: Dict[str, Any]) -> OperationResult:
        resource = self.provider.resource(request.get("type", ""))
        return resource.delete(_mapping(request, "state"))

    def _import_resource(self, request: Dict[str, Any]) -> OperationResult:
        resource = self.provider.resource(request.get("type", ""))
        return resource.import_state(str(request.get("id_to_import") or ""))

    def _stop(self, request: Dict[str, Any]) -> OperationResult:
        self.stopped = True
        return OperationResult()

    def handle(self, request: Any) -> Dict[str, Any]:
        if not isinstance(request, dict):
            return _error("Malformed request", "request must be a JSON object").to_wire()

        method = request.get("method")
        handler = self._methods.get(method) if isinstance(method, str) else None
        if handler is None:
            result = _error("Unknown method", f"method '{method}' is not supported")
        else:
            logger.debug("handling %s", method)
            try:
                result = handler(request)
            except (KeyError, ValueError) as exc:
                # KeyError carries its message quoted
                detail = exc.args[0] if exc.args else str(exc)
                result = _error("Invalid request", str(detail))

        response = result.to_wire()
        response["id"] = request.get("id")
        return response

    def handle_line(self, line: str) -> Optional[Dict[str, Any]]:
        line = line.strip()
        if not line:
            return None
        try:
            request = json.loads(line)
        except json.JSONDecodeError as exc:
            return _error("Malformed request", str(exc)).to_wire()
        return self.handle(request)

    def serve(self, stdin: IO[str], stdout: IO[str]) -> int:
        logger.info("serving provider over stdio")
        for line in stdin:
            response = self.handle_line(line)
            if response is None:
                continue
            stdout.write(json.dumps(response, sort_keys=True) + "\n")
            stdout.flush()
            if self.stopped:
                break
        return 0
