"""Domain input models and result types."""
