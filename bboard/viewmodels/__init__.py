"""ViewModel package for UI state and command surfaces.

Call context:
    ``bboard/app/main.py`` imports concrete viewmodels from this package to
    bind view callbacks to state transitions.

Dependencies:
    Modules in this package depend on domain types and use-case state only.
    I/O adapters remain outside.

Responsibilities:
    - Expose UI state (rows, banner, auth-gated forms) derived from the core.
    - Keep MVVM boundaries explicit by avoiding transport or persistence logic.
"""
