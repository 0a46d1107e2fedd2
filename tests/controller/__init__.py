"""Tests for redis_ctrl.controller."""
