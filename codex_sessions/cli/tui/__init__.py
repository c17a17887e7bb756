"""Interactive session browser."""
