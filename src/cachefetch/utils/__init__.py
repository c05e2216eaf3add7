"""Utility helpers for cachefetch."""
