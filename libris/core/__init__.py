"""Core: configuration, lifespan, exception handlers, rate limiter."""
