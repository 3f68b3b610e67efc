"""Infrastructure: persistence, security primitives, cache and outbound email."""
