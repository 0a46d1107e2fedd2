"""Tests for redis_ctrl.task."""
