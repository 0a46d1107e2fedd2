"""Command line tool for redis-ctrl."""
