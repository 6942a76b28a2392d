"""Routing and geography helpers."""
