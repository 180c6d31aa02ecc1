"""config/ — pydantic settings loaded from config.yaml and TYPEWRITER_* env vars."""
