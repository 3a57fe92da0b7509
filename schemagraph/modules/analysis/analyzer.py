"""
功能：Schema 图分析引擎 (Schema Analyzer)
说明：
    对表关系图执行全部子分析，汇总为不可变的 AnalysisResult 快照。

    流程：
    1. 由输入重新构建 SchemaGraph（不修改输入对象）
    2. 依次执行 基础统计 / 关系分类 / 表指标 / 列指标 / 连通性 / 分组 / 质量 / 复杂度
    3. 任一子分析异常时记录日志并使用该子分析的空结果，其余子分析不受影响
    4. 保存为 last_result，并通过事件总线发布 analysis:complete
"""
import logging
from typing import Callable, Optional, TypeVar

from schemagraph.core.config import Settings, get_settings
from schemagraph.core.events import ANALYSIS_COMPLETE, EventBus
from schemagraph.modules.analysis.complexity import analyze_complexity
from schemagraph.modules.analysis.connectivity import analyze_connectivity
from schemagraph.modules.analysis.grouping import analyze_grouping
from schemagraph.modules.analysis.models import (
    AnalysisResult,
    BasicStatistics,
    ColumnAnalysis,
    ComplexityMetrics,
    ConnectivityAnalysis,
    GroupingAnalysis,
    QualityAssessment,
    RelationshipAnalysis,
    TableAnalysis,
)
from schemagraph.modules.analysis.quality import assess_quality, find_inheritance_groups
from schemagraph.modules.analysis.relationships import analyze_relationships
from schemagraph.modules.analysis.tables import analyze_basic_statistics, analyze_columns, analyze_tables
from schemagraph.modules.graph.model import build_schema_graph
from schemagraph.schemas.schema import SchemaInput

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SchemaAnalyzer:
    """
    Schema 分析引擎

    Args:
        settings: 配置，默认使用全局配置
        event_bus: 可选事件总线
    """

    def __init__(self, settings: Optional[Settings] = None, event_bus: Optional[EventBus] = None):
        self.settings = settings or get_settings()
        self.event_bus = event_bus
        self._last_result: Optional[AnalysisResult] = None

    @property
    def last_result(self) -> Optional[AnalysisResult]:
        """最近一次 analyze 的结果，尚未分析时为 None"""
        return self._last_result

    def _guard(self, name: str, func: Callable[[], T], default: Callable[[], T]) -> T:
        try:
            return func()
        except Exception as e:
            logger.error(f"[SchemaAnalyzer] {name} analysis failed, using empty result: {e}", exc_info=True)
            return default()

    def analyze(self, schema: SchemaInput) -> AnalysisResult:
        """
        执行完整分析

        Args:
            schema: SchemaMetadata 或导入器输出的 dict

        Returns:
            AnalysisResult
        """
        s = self.settings
        graph = build_schema_graph(schema)
        logger.info(
            f"[SchemaAnalyzer] Analyzing {graph.node_count} tables, {len(graph.relationships)} relationships"
        )

        inheritance_groups = self._guard(
            "inheritance",
            lambda: find_inheritance_groups(
                graph, s.ANALYSIS_SIMILARITY_THRESHOLD, s.ANALYSIS_SIMILARITY_MAX_TABLES
            ),
            list,
        )

        result = AnalysisResult(
            basic=self._guard("basic", lambda: analyze_basic_statistics(graph), BasicStatistics),
            relationships=self._guard("relationship", lambda: analyze_relationships(graph), RelationshipAnalysis),
            tables=self._guard("table", lambda: analyze_tables(graph), TableAnalysis),
            columns=self._guard("column", lambda: analyze_columns(graph), ColumnAnalysis),
            connectivity=self._guard(
                "connectivity",
                lambda: analyze_connectivity(graph, s.ANALYSIS_SHORTEST_PATH_MAX_TABLES),
                ConnectivityAnalysis,
            ),
            grouping=self._guard("grouping", lambda: analyze_grouping(graph), GroupingAnalysis),
            quality=self._guard(
                "quality",
                lambda: assess_quality(graph, inheritance_groups, s.ANALYSIS_LARGE_TABLE_COLUMNS),
                QualityAssessment,
            ),
            complexity=self._guard(
                "complexity", lambda: analyze_complexity(graph, inheritance_groups), ComplexityMetrics
            ),
        )

        self._last_result = result
        logger.info(
            f"[SchemaAnalyzer] Done: quality={result.quality.overall_score} ({result.quality.grade}), "
            f"groups={len(result.grouping.groups)}, complexity={result.complexity.classification}"
        )

        if self.event_bus is not None:
            self.event_bus.emit(ANALYSIS_COMPLETE, result)
        return result


# 单例
_schema_analyzer: Optional[SchemaAnalyzer] = None


def get_schema_analyzer() -> SchemaAnalyzer:
    """获取 SchemaAnalyzer 单例"""
    global _schema_analyzer
    if _schema_analyzer is None:
        _schema_analyzer = SchemaAnalyzer()
    return _schema_analyzer
