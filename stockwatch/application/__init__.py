"""Application layer: use cases, DTOs and process-wide monitoring."""
