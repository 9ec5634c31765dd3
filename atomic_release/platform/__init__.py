"""Process, filesystem and HTTP adapters."""
