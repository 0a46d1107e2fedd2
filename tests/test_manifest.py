"""Tests for manifest parsing."""

from pathlib import Path
from typing import Any

import pytest

from redis_ctrl.exceptions import InputException
from redis_ctrl.manifest import (
    NamedResource,
    RedisEntry,
    parse_raw_obj,
    read_entries,
)

ENTRY_YAML = """\
apiVersion: redis.aaspcodes.github.io/v1alpha1
kind: RedisEntry
metadata:
  name: greeting
  namespace: apps
spec:
  key: greeting
  value: hello
  ttl: 3600
"""

OTHER_YAML = """\
apiVersion: v1
kind: ConfigMap
metadata:
  name: settings
data:
  foo: bar
"""


def _doc(**spec: Any) -> dict[str, Any]:
    return {
        "apiVersion": "redis.aaspcodes.github.io/v1alpha1",
        "kind": "RedisEntry",
        "metadata": {"name": "entry-1", "namespace": "default"},
        "spec": spec,
    }


def test_parse_redis_entry() -> None:
    """Test parsing a RedisEntry document."""
    entry = parse_raw_obj(_doc(key="k1", value="v1", ttl=60))
    assert entry == RedisEntry(
        name="entry-1", namespace="default", key="k1", value="v1", ttl=60
    )
    assert entry.resource_id == NamedResource("RedisEntry", "default", "entry-1")
    assert entry.namespaced_name == "default/entry-1"
    assert str(entry.resource_id) == "RedisEntry/default/entry-1"


def test_parse_without_ttl_or_namespace() -> None:
    """Test ttl is optional and namespace defaults to default."""
    doc = _doc(key="k1", value="")
    del doc["metadata"]["namespace"]
    entry = parse_raw_obj(doc)
    assert entry.ttl is None
    assert entry.value == ""
    assert entry.namespace == "default"


@pytest.mark.parametrize(
    ("spec", "match"),
    [
        ({"value": "v1"}, "spec.key"),
        ({"key": "", "value": "v1"}, "spec.key"),
        ({"key": "k1"}, "spec.value"),
        ({"key": "k1", "value": 5}, "spec.value"),
        ({"key": "k1", "value": "v1", "ttl": -1}, "spec.ttl"),
        ({"key": "k1", "value": "v1", "ttl": "10"}, "spec.ttl"),
        ({"key": "k1", "value": "v1", "ttl": True}, "spec.ttl"),
    ],
)
def test_parse_invalid_spec(spec: dict[str, Any], match: str) -> None:
    """Test invalid declared entries are rejected."""
    with pytest.raises(InputException, match=match):
        parse_raw_obj(_doc(**spec))


def test_parse_invalid_objects() -> None:
    """Test objects that are not RedisEntry resources are rejected."""
    with pytest.raises(InputException, match="missing kind"):
        parse_raw_obj({"apiVersion": "v1"})
    with pytest.raises(InputException, match="Unsupported object kind"):
        parse_raw_obj({"apiVersion": "v1", "kind": "ConfigMap"})
    doc = _doc(key="k1", value="v1")
    doc["apiVersion"] = "example.com/v1"
    with pytest.raises(InputException, match="expected"):
        parse_raw_obj(doc)
    doc = _doc(key="k1", value="v1")
    del doc["spec"]
    with pytest.raises(InputException, match="missing spec"):
        parse_raw_obj(doc)


async def test_read_entries_from_directory(tmp_path: Path) -> None:
    """Test reading entries from a directory, skipping other kinds."""
    (tmp_path / "nested").mkdir()
    (tmp_path / "a.yaml").write_text(ENTRY_YAML + "---\n" + OTHER_YAML)
    (tmp_path / "nested" / "b.yml").write_text(
        ENTRY_YAML.replace("name: greeting", "name: other")
    )
    (tmp_path / "README.md").write_text("not yaml: [")

    entries = await read_entries(tmp_path)

    assert [entry.namespaced_name for entry in entries] == [
        "apps/greeting",
        "apps/other",
    ]
    assert entries[0].ttl == 3600


async def test_read_entries_from_file(tmp_path: Path) -> None:
    """Test reading entries from a single file."""
    path = tmp_path / "entry.yaml"
    path.write_text(ENTRY_YAML)
    entries = await read_entries(path)
    assert entries == [
        RedisEntry(
            name="greeting", namespace="apps", key="greeting", value="hello", ttl=3600
        )
    ]


async def test_read_entries_errors(tmp_path: Path) -> None:
    """Test missing paths and malformed YAML are input errors."""
    with pytest.raises(InputException, match="does not exist"):
        await read_entries(tmp_path / "missing")

    path = tmp_path / "broken.yaml"
    path.write_text("key: [unterminated")
    with pytest.raises(InputException, match="Unable to parse"):
        await read_entries(path)


async def test_read_entries_duplicate(tmp_path: Path) -> None:
    """Test two entries with the same namespace and name are rejected."""
    (tmp_path / "a.yaml").write_text(ENTRY_YAML)
    (tmp_path / "b.yaml").write_text(
        ENTRY_YAML.replace("key: greeting", "key: other")
    )
    with pytest.raises(InputException, match="Duplicate RedisEntry apps/greeting"):
        await read_entries(tmp_path)
