"""Tests for redis_ctrl.client."""
