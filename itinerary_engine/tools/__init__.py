"""Tool abstraction layer."""
