"""Tests for configuration, errors and logging."""
