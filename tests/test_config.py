"""Tests for configuration loading."""

from datetime import timedelta

import pytest

from redis_ctrl.config import RedisConfig, RedisEntryControllerConfig
from redis_ctrl.exceptions import InputException


def test_redis_config_defaults() -> None:
    """Test defaults when no environment variables are set."""
    assert RedisConfig.from_env({}) == RedisConfig(
        host="redis-redis-service", port=6379, password=None, db=0
    )


def test_redis_config_from_env() -> None:
    """Test values are read from the environment."""
    config = RedisConfig.from_env(
        {
            "REDIS_HOST": "localhost",
            "REDIS_PORT": "6380",
            "REDIS_PASSWORD": "secret",
            "REDIS_DB": "3",
        }
    )
    assert config == RedisConfig(host="localhost", port=6380, password="secret", db=3)


def test_redis_config_empty_password() -> None:
    """Test an empty password means no password."""
    assert RedisConfig.from_env({"REDIS_PASSWORD": ""}).password is None


def test_redis_config_invalid_port() -> None:
    """Test a malformed port is reported as an input error."""
    with pytest.raises(InputException, match="Invalid Redis setting"):
        RedisConfig.from_env({"REDIS_PORT": "not-a-port"})


def test_controller_config_defaults() -> None:
    """Test the default requeue delays."""
    config = RedisEntryControllerConfig()
    assert config.requeue_after == timedelta(seconds=5)
    assert config.status_requeue_after == timedelta(seconds=1)
    assert config.reconcile_timeout is None
