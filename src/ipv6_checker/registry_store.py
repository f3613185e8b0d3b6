"""
Registry Store module for the endpoint registry file.

Loads the registry (YAML or JSON, chosen by file suffix), converts it to
the in-memory model, and writes it back only when an observable field has
changed. Refreshed ``last_checked`` timestamps alone never cause a write,
so repeated runs against an unchanged network leave the file untouched.
"""

import copy
import json
import os
import re
import tempfile
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Optional

import yaml

from .audit_logger import AuditLogger
from .enums import IPv6Status, LogLevel, TestResult
from .exceptions import PersistenceError, RegistryError
from .models import ConnectivityTest, Endpoint, IPv6Record, Registry


ENDPOINT_ID_PATTERN = re.compile(r"^[a-z0-9-]+$")

ENDPOINT_KEYS = ("id", "name", "url", "category", "description", "ipv6")
IPV6_KEYS = ("status", "notes", "last_checked", "tests")
TEST_KEYS = ("id", "name", "description", "result")


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _timestamp_to_str(value: Any) -> Optional[str]:
    # Unquoted timestamps come back from YAML as datetime objects
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return utc_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class RegistryStore:
    """
    File-backed store for the endpoint registry.

    The document shape is ``{services: [endpoint, ...]}``; other top-level
    keys and unknown endpoint keys are carried through unchanged.
    """

    def __init__(self, file_path: Path, logger: Optional[AuditLogger] = None) -> None:
        """
        Initialize the registry store.

        Args:
            file_path: Path to the registry file (.yaml, .yml or .json)
            logger: Optional audit logger
        """
        self._file_path = Path(file_path)
        self._logger = logger

    @property
    def file_path(self) -> Path:
        """Get the registry file path."""
        return self._file_path

    @property
    def is_json(self) -> bool:
        return self._file_path.suffix.lower() == ".json"

    def load(self) -> Registry:
        """
        Load and convert the registry file.

        Raises:
            PersistenceError: If the file cannot be read or parsed
            RegistryError: If the content is structurally unusable
        """
        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                text = f.read()
        except UnicodeDecodeError as e:
            raise self._failure("parse_error", "Registry file is not valid UTF-8", e)
        except OSError as e:
            raise self._failure("io_error", "Failed to read registry file", e)

        try:
            raw = json.loads(text) if self.is_json else yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise self._failure("parse_error", "Failed to parse registry file", e)

        registry = self.registry_from_dict(raw)
        self._log(
            LogLevel.INFO,
            f"Loaded {len(registry.endpoints)} endpoints",
            {"file_path": str(self._file_path)},
        )
        return registry

    def save(self, registry: Registry) -> None:
        """
        Serialize the registry and atomically replace the file.

        Raises:
            PersistenceError: If the file cannot be written
        """
        text = self.dumps(registry)
        directory = self._file_path.parent
        tmp_name = None

        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._file_path.name}.",
                suffix=".tmp",
                dir=directory,
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, self._file_path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise self._failure("io_error", "Failed to write registry file", e)

        self._log(
            LogLevel.INFO,
            "Registry written",
            {"file_path": str(self._file_path), "endpoints": len(registry.endpoints)},
        )

    def save_if_changed(self, registry: Registry, baseline: Registry) -> bool:
        """
        Write the registry only if it differs from ``baseline``.

        ``last_checked`` values are ignored for the comparison.

        Returns:
            True if the file was written
        """
        if not has_observable_changes(registry, baseline):
            self._log(LogLevel.INFO, "No changes to registry", {"file_path": str(self._file_path)})
            return False
        self.save(registry)
        return True

    def dumps(self, registry: Registry) -> str:
        """Serialize the registry in the file's format."""
        document = self.registry_to_dict(registry)
        if self.is_json:
            return json.dumps(document, indent=2, ensure_ascii=False) + "\n"
        return yaml.safe_dump(
            document,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
            width=120,
        )

    # -- conversion ---------------------------------------------------------

    @staticmethod
    def registry_from_dict(raw: Any) -> Registry:
        """
        Convert a parsed document into a Registry.

        Raises:
            RegistryError: On a missing services list, invalid entries or
                duplicate endpoint ids
        """
        if not isinstance(raw, dict) or not isinstance(raw.get("services"), list):
            raise RegistryError(
                code="invalid_registry",
                message="Registry must be a mapping with a 'services' list",
                details={},
            )

        endpoints = []
        seen_ids: set[str] = set()
        for index, entry in enumerate(raw["services"]):
            endpoint = RegistryStore.endpoint_from_dict(entry, index)
            if endpoint.id in seen_ids:
                raise RegistryError(
                    code="duplicate_id",
                    message=f"Duplicate endpoint id: {endpoint.id}",
                    details={"endpoint_id": endpoint.id, "index": index},
                )
            seen_ids.add(endpoint.id)
            endpoints.append(endpoint)

        extra = {k: v for k, v in raw.items() if k != "services"}
        return Registry(endpoints=endpoints, extra=extra)

    @staticmethod
    def endpoint_from_dict(entry: Any, index: int = 0) -> Endpoint:
        if not isinstance(entry, dict):
            raise RegistryError(
                code="invalid_endpoint",
                message=f"Registry entry {index} is not a mapping",
                details={"index": index},
            )

        endpoint_id = entry.get("id")
        url = entry.get("url")
        if not isinstance(endpoint_id, str) or not ENDPOINT_ID_PATTERN.match(endpoint_id):
            raise RegistryError(
                code="invalid_endpoint",
                message=f"Registry entry {index} has an invalid id: {endpoint_id!r}",
                details={"index": index},
            )
        if not isinstance(url, str):
            raise RegistryError(
                code="invalid_endpoint",
                message=f"Endpoint {endpoint_id} has no url",
                details={"endpoint_id": endpoint_id},
            )

        return Endpoint(
            id=endpoint_id,
            name=str(entry.get("name", endpoint_id)),
            url=url,
            category=entry.get("category"),
            description=entry.get("description"),
            ipv6=RegistryStore.record_from_dict(entry.get("ipv6") or {}, endpoint_id),
            extra={k: v for k, v in entry.items() if k not in ENDPOINT_KEYS},
        )

    @staticmethod
    def record_from_dict(raw: Any, endpoint_id: str) -> IPv6Record:
        if not isinstance(raw, dict):
            raise RegistryError(
                code="invalid_endpoint",
                message=f"Endpoint {endpoint_id} has an invalid ipv6 record",
                details={"endpoint_id": endpoint_id},
            )

        try:
            status = IPv6Status(raw.get("status", IPv6Status.UNKNOWN.value))
        except ValueError:
            raise RegistryError(
                code="invalid_status",
                message=f"Endpoint {endpoint_id} has an invalid status: {raw.get('status')!r}",
                details={"endpoint_id": endpoint_id},
            )

        tests = []
        for test in raw.get("tests") or []:
            if not isinstance(test, dict) or not isinstance(test.get("id"), str):
                raise RegistryError(
                    code="invalid_test",
                    message=f"Endpoint {endpoint_id} has a test without id",
                    details={"endpoint_id": endpoint_id},
                )
            result = test.get("result")
            if result is not None and not isinstance(result, bool):
                raise RegistryError(
                    code="invalid_test",
                    message=f"Test {test['id']} of {endpoint_id} has a non-boolean result",
                    details={"endpoint_id": endpoint_id, "test_id": test["id"]},
                )
            tests.append(ConnectivityTest(
                id=test["id"],
                name=str(test.get("name", test["id"])),
                description=str(test.get("description", "")),
                result=TestResult.from_bool(result),
                extra={k: v for k, v in test.items() if k not in TEST_KEYS},
            ))

        return IPv6Record(
            status=status,
            notes=raw.get("notes"),
            last_checked=_timestamp_to_str(raw.get("last_checked")),
            tests=tests,
            extra={k: v for k, v in raw.items() if k not in IPV6_KEYS},
        )

    @staticmethod
    def registry_to_dict(registry: Registry) -> dict:
        document = {"services": [RegistryStore.endpoint_to_dict(e) for e in registry.endpoints]}
        document.update(copy.deepcopy(registry.extra))
        return document

    @staticmethod
    def endpoint_to_dict(endpoint: Endpoint) -> dict:
        data: dict[str, Any] = {"id": endpoint.id, "name": endpoint.name, "url": endpoint.url}
        if endpoint.category is not None:
            data["category"] = endpoint.category
        if endpoint.description is not None:
            data["description"] = endpoint.description
        data.update(copy.deepcopy(endpoint.extra))

        record = endpoint.ipv6
        ipv6: dict[str, Any] = {"status": record.status.value}
        if record.notes is not None:
            ipv6["notes"] = record.notes
        ipv6["last_checked"] = record.last_checked
        ipv6["tests"] = [RegistryStore.test_to_dict(test) for test in record.tests]
        ipv6.update(copy.deepcopy(record.extra))
        data["ipv6"] = ipv6
        return data

    @staticmethod
    def test_to_dict(test: ConnectivityTest) -> dict:
        data = {
            "id": test.id,
            "name": test.name,
            "description": test.description,
            "result": test.result.to_bool(),
        }
        data.update(copy.deepcopy(test.extra))
        return data

    def _failure(self, code: str, message: str, error: Exception) -> PersistenceError:
        details = {"file_path": str(self._file_path)}
        if self._logger:
            self._logger.log_error("RegistryStore", message, error, details)
        return PersistenceError(code=code, message=f"{message}: {error}", details=details)

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "RegistryStore", message, data)


def observable_snapshot(registry: Registry) -> dict:
    """Registry as a plain document with every ``last_checked`` blanked out."""
    document = RegistryStore.registry_to_dict(registry)
    for entry in document["services"]:
        entry["ipv6"]["last_checked"] = None
    return document


def has_observable_changes(registry: Registry, baseline: Registry) -> bool:
    """True if the registries differ in anything but ``last_checked``."""
    return observable_snapshot(registry) != observable_snapshot(baseline)
