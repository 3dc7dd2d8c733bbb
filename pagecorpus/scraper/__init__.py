"""Scraper package: render, extract and persist article text."""

from pagecorpus.scraper.lanes import run_lanes
from pagecorpus.scraper.models import Article, Record, RunStats, SkipReason, UrlState
from pagecorpus.scraper.pipeline import ScrapePipeline

__all__ = [
    "run_lanes",
    "ScrapePipeline",
    "Article",
    "Record",
    "RunStats",
    "SkipReason",
    "UrlState",
]
