"""Bundled language pattern catalog."""
