"""Test suite for codeparse."""
