"""Upstream services the relay delegates to."""
