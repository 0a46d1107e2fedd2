"""Tests for redis_ctrl.tool."""
