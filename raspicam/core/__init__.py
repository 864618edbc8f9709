"""Shared infrastructure: paths, logging, configuration and asyncio helpers."""
