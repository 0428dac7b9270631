"""
American Dream Monitor

Tracks AI's impact on American workers: pulls recent AI-and-labor news and a
FRED labor-market series, asks Gemini for a structured assessment, stores
the result, and renders the history on a dashboard.

Usage:
    python -m dream_monitor.run --analyze      # Run one analysis
    python -m dream_monitor.run --serve        # Start the HTTP API
    python -m dream_monitor.run --dashboard    # Write the HTML dashboard
    python -m dream_monitor.run --history      # Print metric deltas
    python -m dream_monitor.run --snapshot     # Record a macro snapshot
"""

from .config import MonitorConfig
from .pipeline import PipelineResult, PipelineStage, ReportPipeline

__version__ = "0.1.0"

__all__ = [
    "MonitorConfig",
    "PipelineResult",
    "PipelineStage",
    "ReportPipeline",
]
