"""RPSSL game service."""
