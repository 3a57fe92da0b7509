"""
布局引擎模块 (Layout Module)

为表关系图计算无重叠的二维布局。
"""
from schemagraph.modules.layout.engine import LayoutEngine, LayoutStrategy, get_layout_engine
from schemagraph.modules.layout.models import LayoutResult, LayoutStatistics, TablePosition
from schemagraph.modules.layout.quality import compute_layout_statistics, count_crossings, optimize_crossings
from schemagraph.modules.layout.sizing import estimate_table_size

__all__ = [
    "LayoutEngine",
    "LayoutStrategy",
    "get_layout_engine",
    "LayoutResult",
    "LayoutStatistics",
    "TablePosition",
    "compute_layout_statistics",
    "count_crossings",
    "optimize_crossings",
    "estimate_table_size",
]
