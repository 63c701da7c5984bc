"""Progress aggregation against goal targets."""

from .aggregator import DeliverableProgress, Progress, ProgressAggregator, progress_as_dict

__all__ = ["DeliverableProgress", "Progress", "ProgressAggregator", "progress_as_dict"]
