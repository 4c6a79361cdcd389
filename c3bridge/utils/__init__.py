"""Utility helpers for c3bridge."""
