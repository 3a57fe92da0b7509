"""
功能：布局结果数据模型
说明：
    TablePosition 的 (x, y) 为表框左上角坐标；LayoutResult 中每张输入表恰好一条记录。
"""
import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from schemagraph.schemas.schema import SchemaMetadata


@dataclass
class TablePosition:
    """单张表的位置与尺寸"""
    name: str
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    z_index: int = 0  # 预留给渲染层做层叠，目前恒为 0

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.width, self.height))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "z_index": self.z_index,
        }

    def to_render_dict(self) -> Dict[str, Any]:
        """渲染层使用的记录 {name, x, y, width, height, zIndex}"""
        return {
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "zIndex": self.z_index,
        }


@dataclass
class LayoutStatistics:
    """布局质量统计"""
    total_tables: int = 0
    total_relationships: int = 0
    overlaps: int = 0
    crossings: int = 0
    layout_efficiency: int = 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_tables": self.total_tables,
            "total_relationships": self.total_relationships,
            "overlaps": self.overlaps,
            "crossings": self.crossings,
            "layout_efficiency": self.layout_efficiency,
        }


@dataclass
class LayoutResult:
    """布局结果"""
    strategy: str
    tables: List[TablePosition] = field(default_factory=list)
    statistics: Optional[LayoutStatistics] = None

    def get(self, name: str) -> Optional[TablePosition]:
        for position in self.tables:
            if position.name == name:
                return position
        return None

    def positions_by_name(self) -> Dict[str, Dict[str, Any]]:
        return {p.name: p.to_dict() for p in self.tables}

    def to_render_records(self) -> List[Dict[str, Any]]:
        return [p.to_render_dict() for p in self.tables]

    def copy(self) -> "LayoutResult":
        return LayoutResult(
            strategy=self.strategy,
            tables=[replace(p) for p in self.tables],
            statistics=replace(self.statistics) if self.statistics else None,
        )

    def apply_to(self, schema: SchemaMetadata) -> SchemaMetadata:
        """把坐标写回 Schema 中的表（显式调用才会修改输入对象）"""
        positions = {p.name: p for p in self.tables}
        for table in schema.tables:
            position = positions.get(table.name)
            if position is not None:
                table.x = position.x
                table.y = position.y
        return schema

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy,
            "tables": [p.to_dict() for p in self.tables],
            "statistics": self.statistics.to_dict() if self.statistics else None,
        }
