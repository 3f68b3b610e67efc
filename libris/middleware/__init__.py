"""HTTP middleware. Applied in libris.main.create_app()."""

from libris.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
