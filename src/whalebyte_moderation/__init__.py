"""WhaleByte community moderation engine."""
