"""Command-line helpers for operators."""
