"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations for domain ports (HTTP gateway, local
    credential storage, task runners, notification fallbacks).

Dependencies:
    Individual submodules depend on ``requests``, filesystem APIs,
    ``concurrent.futures`` and domain protocol definitions.

Call context:
    Imported by ``bboard.app.controller`` for runtime wiring and by tests for
    transport-level behavior verification.
"""
