"""Infrastructure layer - storage implementations."""
