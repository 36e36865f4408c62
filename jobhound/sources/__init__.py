from __future__ import annotations

import logging

from jobhound.browser import BrowserFetcher
from jobhound.config import Settings
from jobhound.http import HttpFetcher
from jobhound.log import get_logger

from .base import BoardSource, JobSource, PageFetcher
from .braintrust import BraintrustSource
from .freelancer import FreelancerSource
from .glassdoor import GlassdoorSource
from .hireline import HirelineSource
from .indeed import IndeedSource
from .linkedin import LinkedInSource
from .remote_boards import RemoteComSource, RemoteCoSource, WellfoundSource
from .stackoverflow import StackOverflowSource
from .upwork import UpworkSource

log = get_logger(__name__)

__all__ = [
    "JobSource", "BoardSource", "PageFetcher", "REGISTRY", "register", "get_sources",
    "UpworkSource", "FreelancerSource", "HirelineSource", "IndeedSource",
    "BraintrustSource", "GlassdoorSource", "LinkedInSource", "RemoteCoSource",
    "WellfoundSource", "StackOverflowSource", "RemoteComSource",
]

# Insertion order is the order results are reported in.
REGISTRY: dict[str, type[JobSource]] = {}


def register(cls: type[JobSource]) -> type[JobSource]:
    if not cls.source:
        raise ValueError(f"{cls.__name__} has no source id")
    REGISTRY[cls.source] = cls
    return cls


for _cls in (
    LinkedInSource, UpworkSource, FreelancerSource, IndeedSource, HirelineSource,
    BraintrustSource, GlassdoorSource, RemoteCoSource, WellfoundSource,
    StackOverflowSource, RemoteComSource,
):
    register(_cls)


def get_sources(settings: Settings, *, logger: logging.Logger | None = None) -> list[JobSource]:
    """Instantiate the enabled drivers in registry order."""
    enabled = settings.enabled_sources
    if enabled:
        unknown = [name for name in enabled if name not in REGISTRY]
        for name in unknown:
            log.warning("Ignoring unknown source %r", name)

    browser = BrowserFetcher(headless=settings.headless, timeout=settings.navigation_timeout)
    http = HttpFetcher(timeout=settings.navigation_timeout, retries=settings.retry)
    sources: list[JobSource] = []
    for name, cls in REGISTRY.items():
        if enabled and name not in enabled:
            continue
        kwargs = {"max_results": settings.max_results, "logger": logger}
        if issubclass(cls, BoardSource):
            kwargs["fetcher"] = browser
        else:
            kwargs["fetcher"] = http
        if issubclass(cls, LinkedInSource):
            kwargs["fallback"] = http
        sources.append(cls(**kwargs))
        log.info("Registered source: %s", cls.label)
    return sources
