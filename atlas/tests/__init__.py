"""Tests for the atlas package."""
