"""Tests for redis-ctrl."""
