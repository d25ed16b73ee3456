"""Persistence for package submissions, review results and admin settings."""
