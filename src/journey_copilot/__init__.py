"""Journey Copilot: stateless email-sequence discovery assistant."""

__version__ = "1.0.0"
