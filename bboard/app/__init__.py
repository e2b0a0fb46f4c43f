"""Application composition layer for the Tkinter client.

Controllers in this package wire views, view models, adapters, and use cases
into a runnable desktop client without placing business logic in views.
"""
