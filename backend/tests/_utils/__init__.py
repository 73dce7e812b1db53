"""Shared builders for the expertbook test-suite."""
