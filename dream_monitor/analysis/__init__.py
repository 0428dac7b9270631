"""
Model prompting and output validation.
"""

from .gemini_analyzer import GeminiReportAnalyzer
from .schema import DEFAULT_SCHEMA, Assessment, SchemaVersion, parse_assessment

__all__ = [
    "Assessment",
    "DEFAULT_SCHEMA",
    "GeminiReportAnalyzer",
    "SchemaVersion",
    "parse_assessment",
]
