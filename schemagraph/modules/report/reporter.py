"""
功能：Schema 质量报告 (Schema Quality Reporter)
说明：
    对分析引擎最近一次结果的只读投影，不做新的计算：
    - 读取最近一次 AnalysisResult
    - 按表名查询所属分组 / 列出全部分组
    - 导出为 dict、JSON 字符串或 CSV 摘要（Metric,Value,Description）
    尚未执行过分析时，读取与导出都会抛出 AnalysisNotAvailableError。
"""
import csv
import io
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from schemagraph.modules.analysis.analyzer import SchemaAnalyzer
from schemagraph.modules.analysis.models import AnalysisResult, TableGroup
from schemagraph.schemas.schema import SchemaInput

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "csv", "dict")
CSV_HEADERS = ("Metric", "Value", "Description")


class AnalysisNotAvailableError(RuntimeError):
    """尚未执行分析就读取或导出结果"""

    def __init__(self, message: str = "No analysis results available. Run analysis first."):
        super().__init__(message)


class SchemaQualityReporter:
    """
    Schema 质量报告

    Args:
        analyzer: 分析引擎，默认新建一个
    """

    def __init__(self, analyzer: Optional[SchemaAnalyzer] = None):
        self.analyzer = analyzer or SchemaAnalyzer()

    def analyze(self, schema: SchemaInput) -> AnalysisResult:
        return self.analyzer.analyze(schema)

    def get_analysis_results(self) -> AnalysisResult:
        result = self.analyzer.last_result
        if result is None:
            raise AnalysisNotAvailableError()
        return result

    def get_table_group(self, table_name: str) -> Optional[TableGroup]:
        return self.get_analysis_results().grouping.group_of(table_name)

    def get_all_groups(self) -> List[TableGroup]:
        return list(self.get_analysis_results().grouping.groups)

    def summary_rows(self) -> List[Dict[str, Any]]:
        """CSV 摘要中的指标行"""
        result = self.get_analysis_results()
        basic = result.basic
        quality = result.quality
        return [
            {"Metric": "Total Tables", "Value": basic.total_tables,
             "Description": "Number of tables in schema"},
            {"Metric": "Total Columns", "Value": basic.total_columns,
             "Description": "Number of columns across all tables"},
            {"Metric": "Total Relationships", "Value": basic.total_relationships,
             "Description": "Number of relationships"},
            {"Metric": "Avg Columns Per Table", "Value": f"{basic.avg_columns_per_table:.2f}",
             "Description": "Average columns per table"},
            {"Metric": "Overall Quality Score", "Value": quality.overall_score,
             "Description": "Overall schema quality (0-100)"},
            {"Metric": "Quality Grade", "Value": quality.grade,
             "Description": "Letter grade for schema quality"},
        ]

    def export_analysis(self, format: str = "json") -> Union[str, Dict[str, Any]]:
        """
        导出分析结果

        Args:
            format: json（JSON 字符串）/ csv（CSV 摘要字符串）/ dict（结构化数据）

        Returns:
            str 或 dict

        Raises:
            AnalysisNotAvailableError: 尚未执行分析
            ValueError: 不支持的格式
        """
        if format not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format: {format}, expected one of {EXPORT_FORMATS}")

        result = self.get_analysis_results()

        if format == "csv":
            buffer = io.StringIO()
            writer = csv.DictWriter(buffer, fieldnames=CSV_HEADERS, lineterminator="\n")
            writer.writeheader()
            writer.writerows(self.summary_rows())
            return buffer.getvalue()

        data = {
            "analysis": result.to_dict(),
            "exported_at": datetime.now(timezone.utc).isoformat(),
            "format": format,
        }
        if format == "dict":
            return data

        logger.debug(f"[SchemaQualityReporter] Exporting analysis from {result.timestamp} as JSON")
        return json.dumps(data, ensure_ascii=False, indent=2)
