"""Test suite for c3bridge."""
