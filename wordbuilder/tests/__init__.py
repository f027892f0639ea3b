"""Tests for the word builder client."""
