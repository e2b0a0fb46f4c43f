"""Tkinter views. UI-only: rendering and intent callbacks."""
