"""Application layer: DTOs, ports and the identity lifecycle services."""
