"""Core leveldag building blocks: domain model, orchestration, config and logging."""
