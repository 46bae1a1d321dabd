"""User profiles with per-user settings, served over HTTP."""
