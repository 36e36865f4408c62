"""Remote QA job discovery across freelance platforms and job boards."""

__version__ = "0.1.0"
