"""Tests for aiosyncbeat."""
