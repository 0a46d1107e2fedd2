"""Tests for redis_ctrl.store."""
