"""Atomic semantic releases: version derivation, changelogs and reversible release steps."""

__version__ = "0.1.0"
