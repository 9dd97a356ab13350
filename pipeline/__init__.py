"""
OpenBibles - Pipeline Module

Single-pass extraction over the source tree:
- PipelineDriver: enumerate sources and files, detect, parse, isolate failures
- VerseAggregator: stable sort and per-source deduplication
- write_output / read_output: the JSON collection handed to the importer
"""
from pipeline.aggregator import AggregateSummary, VerseAggregator
from pipeline.driver import (
    PipelineDriver,
    RunReport,
    SourceStats,
    read_output,
    run_pipeline,
    write_output,
)

__all__ = [
    "AggregateSummary",
    "VerseAggregator",
    "PipelineDriver",
    "RunReport",
    "SourceStats",
    "read_output",
    "run_pipeline",
    "write_output",
]
