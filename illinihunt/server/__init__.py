"""HTTP API and CLI entrypoints."""
