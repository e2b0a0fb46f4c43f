"""Use-case layer for the board client workflows.

Each module coordinates domain objects and ports without performing transport
I/O directly; gateway work is always dispatched through the session store.
"""
