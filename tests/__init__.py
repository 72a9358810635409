"""Tests for the requestguard package."""
