"""Application layer - services, use cases, interfaces, and DTOs."""
