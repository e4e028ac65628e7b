"""Core of an event scheduling client: view navigation, toast messages, background tasks, caching and tray IPC."""

__version__ = "0.1.0"