"""Tests for appshell-build."""
