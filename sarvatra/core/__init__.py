"""Core configuration, security primitives and database wiring."""
