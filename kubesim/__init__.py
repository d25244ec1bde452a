"""kubesim: a kubectl simulator over an in-memory, event-sourced cluster."""

__version__ = "0.1.0"
