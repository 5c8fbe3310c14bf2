"""Shared utilities: exceptions, identifier normalization, async helpers."""
