"""Representation of declared RedisEntry resources.

A RedisEntry is the declared intent that a key in the external key-value store
should hold a value, optionally expiring after a number of seconds. Entries are
typically read from the same YAML documents that are applied to the cluster.
"""

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any, ClassVar

import aiofiles
import yaml
from mashumaro import DataClassDictMixin
from mashumaro.config import BaseConfig

from .exceptions import InputException

__all__ = [
    "read_entries",
    "parse_raw_obj",
    "NamedResource",
    "RedisEntry",
]

_LOGGER = logging.getLogger(__name__)


# Match a prefix of apiVersion to ensure we have the right type of object.
# We don't check specific versions for forward compatibility on upgrade.
REDIS_ENTRY_DOMAIN = "redis.aaspcodes.github.io"
REDIS_ENTRY_KIND = "RedisEntry"
DEFAULT_NAMESPACE = "default"

YAML_SUFFIXES = (".yaml", ".yml")


def _check_version(doc: dict[str, Any], version: str) -> None:
    """Assert that the resource has the specified version."""
    if not (api_version := doc.get("apiVersion")):
        raise InputException(f"Invalid object missing apiVersion: {doc}")
    if not api_version.startswith(version):
        raise InputException(f"Invalid object expected '{version}': {doc}")


@dataclass
class BaseManifest(DataClassDictMixin):
    """Base class for all manifest objects."""

    class Config(BaseConfig):
        omit_none = True


@dataclass(frozen=True, order=True)
class NamedResource:
    """Identifier for a kubernetes resource."""

    kind: str
    namespace: str | None
    name: str

    @property
    def namespaced_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    def __str__(self) -> str:
        """Return the kind and namespaced name concatenated as an id."""
        return f"{self.kind}/{self.namespaced_name}"


@dataclass
class RedisEntry(BaseManifest):
    """A declared key-value pair that should be present in Redis."""

    kind: ClassVar[str] = REDIS_ENTRY_KIND
    """The kind of the object."""

    name: str
    """The name of the resource."""

    namespace: str
    """The namespace of the resource."""

    key: str
    """The key to set in the store."""

    value: str
    """The value the key should hold."""

    ttl: int | None = None
    """Time-to-live in seconds. Absent or zero means the key never expires."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "RedisEntry":
        """Parse a RedisEntry from a raw kubernetes object."""
        _check_version(doc, REDIS_ENTRY_DOMAIN)
        if not (metadata := doc.get("metadata")):
            raise InputException(f"Invalid {cls} missing metadata: {doc}")
        if not (name := metadata.get("name")):
            raise InputException(f"Invalid {cls} missing metadata.name: {doc}")
        namespace = metadata.get("namespace") or DEFAULT_NAMESPACE
        if not (spec := doc.get("spec")):
            raise InputException(f"Invalid {cls} missing spec: {doc}")
        key = spec.get("key")
        if not isinstance(key, str) or not key:
            raise InputException(
                f"Invalid {cls} {namespace}/{name} spec.key must be a non-empty string"
            )
        value = spec.get("value")
        if not isinstance(value, str):
            raise InputException(
                f"Invalid {cls} {namespace}/{name} spec.value must be a string"
            )
        ttl = spec.get("ttl")
        if ttl is not None and (
            isinstance(ttl, bool) or not isinstance(ttl, int) or ttl < 0
        ):
            raise InputException(
                f"Invalid {cls} {namespace}/{name} spec.ttl must be an integer >= 0"
            )
        return cls(name=name, namespace=namespace, key=key, value=value, ttl=ttl)

    @property
    def namespaced_name(self) -> str:
        """Return the namespace and name concatenated as an id."""
        return f"{self.namespace}/{self.name}"

    @property
    def resource_id(self) -> NamedResource:
        """Return the identifier used to track this entry in the store."""
        return NamedResource(self.kind, self.namespace, self.name)


def is_redis_entry(obj: dict[str, Any]) -> bool:
    """Check if the object is a RedisEntry."""
    return obj.get("kind") == REDIS_ENTRY_KIND and obj.get(
        "apiVersion", ""
    ).startswith(REDIS_ENTRY_DOMAIN)


def parse_raw_obj(obj: dict[str, Any]) -> RedisEntry:
    """Parse a raw kubernetes object into a RedisEntry."""
    if not (kind := obj.get("kind")):
        raise InputException(f"Invalid object missing kind: {obj}")
    if kind != REDIS_ENTRY_KIND:
        raise InputException(f"Unsupported object kind '{kind}': {obj}")
    return RedisEntry.parse_doc(obj)


def _yaml_files(path: Path) -> list[Path]:
    if path.is_dir():
        return sorted(p for p in path.rglob("*") if p.suffix in YAML_SUFFIXES)
    return [path]


async def read_entries(path: Path) -> list[RedisEntry]:
    """Return all RedisEntry objects found in a file or directory of YAML files.

    Documents of any other kind are ignored so that entries can live alongside
    the rest of an application's manifests. Two entries with the same namespace
    and name are an input error.
    """
    if not path.exists():
        raise InputException(f"Path does not exist: {path}")
    entries: list[RedisEntry] = []
    seen: dict[NamedResource, Path] = {}
    for yaml_file in _yaml_files(path):
        async with aiofiles.open(str(yaml_file)) as manifest_file:
            content = await manifest_file.read()
        try:
            docs = list(yaml.safe_load_all(content))
        except yaml.YAMLError as err:
            raise InputException(f"Unable to parse {yaml_file}: {err}") from err
        for doc in docs:
            if not isinstance(doc, dict) or not is_redis_entry(doc):
                _LOGGER.debug("Skipping non-RedisEntry document in %s", yaml_file)
                continue
            entry = parse_raw_obj(doc)
            if (previous := seen.get(entry.resource_id)) is not None:
                raise InputException(
                    f"Duplicate RedisEntry {entry.namespaced_name} in {yaml_file}"
                    f" (first defined in {previous})"
                )
            seen[entry.resource_id] = yaml_file
            entries.append(entry)
    _LOGGER.debug("Read %d RedisEntry objects from %s", len(entries), path)
    return entries
