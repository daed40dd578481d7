"""Batch processing of candidate files."""

from vshrink.jobs.batch import BatchDriver
from vshrink.jobs.summary import BatchSummary, outcome_to_dict

__all__ = ["BatchDriver", "BatchSummary", "outcome_to_dict"]
