"""
质量报告模块 (Report Module)
"""
from schemagraph.modules.report.reporter import (
    AnalysisNotAvailableError,
    SchemaQualityReporter,
)

__all__ = [
    "AnalysisNotAvailableError",
    "SchemaQualityReporter",
]
