"""HTTP API for AiValidator."""
