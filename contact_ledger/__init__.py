"""Contact identity and data-quality service."""
