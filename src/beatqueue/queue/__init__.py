"""Queue building and editing helpers."""
