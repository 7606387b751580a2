"""Deep Thoughts — a small social content service.

Users post short "thoughts", react to them, and keep a friend list,
all through one query/mutation API. Identity rides on a short-lived
signed token; the bundled client keeps its cached views consistent
after writes without refetching.
"""

__version__ = "0.1.0"
