"""Small helpers shared by schemas and services."""
