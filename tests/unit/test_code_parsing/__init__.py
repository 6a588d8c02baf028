"""Tests for code parsing models, handlers and the parser facade."""
