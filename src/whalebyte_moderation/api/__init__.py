"""HTTP API for the moderation engine."""
