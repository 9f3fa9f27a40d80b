"""HTTP middleware"""

from scriptpolish.middleware.body_limit import BodySizeLimitMiddleware

__all__ = ["BodySizeLimitMiddleware"]
