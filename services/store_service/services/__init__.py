"""Business logic for the store service."""
