"""Geometry registry service."""
