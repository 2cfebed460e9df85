"""Adapters between external payloads and the domain."""
