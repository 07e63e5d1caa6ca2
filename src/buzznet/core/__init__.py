"""Configuration, security primitives and error taxonomy."""
