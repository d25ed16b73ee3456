"""AI-assisted compliance review pipeline for component repositories."""
