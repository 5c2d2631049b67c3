"""HTTP API: blueprints, request schemas and validation."""
