"""
功能：布局引擎 (Layout Engine)
说明：
    为每张表计算二维坐标，结果无重叠且整体以原点为中心。

    策略：
    1. auto          表数量不超过阈值时使用力导向布局，否则使用网格布局
    2. force         力导向（斥力 k/d²，引力 d²/k，温度指数衰减）
                     -> 网格吸附 -> 重叠消解 -> 居中
    3. grid          ceil(sqrt(n)) 列的确定性网格
    4. circular      等角度环形排列，半径随表数量增长
    5. hierarchical  无入边的表为根，BFS 分层后按层水平排列；
                     从任何根都不可达的表以网格形式放在最下方

    每次调用都从头计算，不保留任何状态；随机扰动使用注入的伪随机数生成器。
"""
import logging
import math
import random
from collections import deque
from enum import Enum
from typing import Dict, List, Optional

from schemagraph.core.config import Settings, get_settings
from schemagraph.core.events import LAYOUT_COMPLETE, EventBus
from schemagraph.modules.graph.model import SchemaGraph, build_schema_graph
from schemagraph.modules.layout.geometry import align_to_grid, center_layout, resolve_overlaps
from schemagraph.modules.layout.models import LayoutResult, TablePosition
from schemagraph.modules.layout.quality import compute_layout_statistics, optimize_crossings
from schemagraph.modules.layout.sizing import estimate_table_size
from schemagraph.schemas.schema import SchemaInput

logger = logging.getLogger(__name__)


class LayoutStrategy(str, Enum):
    """布局策略"""
    AUTO = "auto"
    FORCE = "force"
    GRID = "grid"
    CIRCULAR = "circular"
    HIERARCHICAL = "hierarchical"


class LayoutEngine:
    """
    布局引擎

    Args:
        settings: 配置，默认使用全局配置
        event_bus: 可选事件总线，计算完成后发布 layout:complete
        rng: 可选随机数生成器；不传时每次调用按 LAYOUT_RANDOM_SEED 新建
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        event_bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or get_settings()
        self.event_bus = event_bus
        self._rng = rng

    # ========================================================================
    # 公共接口
    # ========================================================================

    def compute_layout(
        self,
        schema: SchemaInput,
        strategy: str = LayoutStrategy.AUTO,
        rng: Optional[random.Random] = None,
    ) -> LayoutResult:
        """
        计算布局

        Args:
            schema: SchemaMetadata 或导入器输出的 dict
            strategy: auto / force / grid / circular / hierarchical
            rng: 本次调用使用的随机数生成器（仅力导向布局使用）

        Returns:
            LayoutResult: 每张表一条记录
        """
        strategy = LayoutStrategy(strategy)
        graph = build_schema_graph(schema)
        boxes = self._measure(graph)

        if strategy == LayoutStrategy.AUTO:
            if len(boxes) > self.settings.LAYOUT_FORCE_MAX_TABLES:
                strategy = LayoutStrategy.GRID
            else:
                strategy = LayoutStrategy.FORCE

        logger.info(f"[LayoutEngine] Computing {strategy.value} layout for {len(boxes)} tables")

        if boxes:
            if strategy == LayoutStrategy.FORCE:
                self._apply_force_directed(boxes, graph, rng or self._new_rng())
            elif strategy == LayoutStrategy.GRID:
                self._apply_grid(boxes)
            elif strategy == LayoutStrategy.CIRCULAR:
                self._apply_circular(boxes)
            else:
                self._apply_hierarchical(boxes, graph)

        result = LayoutResult(
            strategy=strategy.value,
            tables=boxes,
            statistics=compute_layout_statistics(boxes, graph.relationships, self.settings.LAYOUT_MIN_SPACING),
        )
        logger.debug(f"[LayoutEngine] Statistics: {result.statistics.to_dict()}")

        if self.event_bus is not None:
            self.event_bus.emit(LAYOUT_COMPLETE, result)
        return result

    def force_directed_layout(self, schema: SchemaInput, rng: Optional[random.Random] = None) -> LayoutResult:
        return self.compute_layout(schema, LayoutStrategy.FORCE, rng=rng)

    def grid_layout(self, schema: SchemaInput) -> LayoutResult:
        return self.compute_layout(schema, LayoutStrategy.GRID)

    def circular_layout(self, schema: SchemaInput) -> LayoutResult:
        return self.compute_layout(schema, LayoutStrategy.CIRCULAR)

    def hierarchical_layout(self, schema: SchemaInput) -> LayoutResult:
        return self.compute_layout(schema, LayoutStrategy.HIERARCHICAL)

    def optimize_crossings(self, result: LayoutResult, schema: SchemaInput, iterations: int = 10) -> LayoutResult:
        """在已有布局上交换相邻表以减少连线交叉"""
        graph = build_schema_graph(schema)
        return optimize_crossings(result, graph.relationships, self.settings.LAYOUT_MIN_SPACING, iterations)

    # ========================================================================
    # 内部实现
    # ========================================================================

    def _new_rng(self) -> random.Random:
        if self._rng is not None:
            return self._rng
        # LAYOUT_RANDOM_SEED 为 None 时 random.Random(None) 使用系统熵
        return random.Random(self.settings.LAYOUT_RANDOM_SEED)

    def _measure(self, graph: SchemaGraph) -> List[TablePosition]:
        boxes = []
        for name, table in graph.tables.items():
            width, height = estimate_table_size(table)
            boxes.append(TablePosition(name=name, width=width, height=height))
        return boxes

    def _cell_pitch(self, boxes: List[TablePosition]):
        s = self.settings
        pitch_x = max(s.LAYOUT_CELL_SPACING, max(b.width for b in boxes) + s.LAYOUT_MIN_SPACING + s.LAYOUT_GRID_SIZE)
        pitch_y = max(s.LAYOUT_CELL_SPACING, max(b.height for b in boxes) + s.LAYOUT_MIN_SPACING + s.LAYOUT_GRID_SIZE)
        return pitch_x, pitch_y

    def _apply_grid(self, boxes: List[TablePosition]) -> None:
        """
        确定性网格布局

        单元间距默认 LAYOUT_CELL_SPACING，最大的表放不下时按最大尺寸加最小间距放大，
        保证网格中不会出现重叠。
        """
        columns = math.ceil(math.sqrt(len(boxes)))
        pitch_x, pitch_y = self._cell_pitch(boxes)
        for index, box in enumerate(boxes):
            row, col = divmod(index, columns)
            box.x = col * pitch_x
            box.y = row * pitch_y
        center_layout(boxes)

    def _initialize_positions(self, boxes: List[TablePosition], rng: random.Random) -> None:
        columns = math.ceil(math.sqrt(len(boxes)))
        spacing = self.settings.LAYOUT_CELL_SPACING
        jitter = self.settings.LAYOUT_JITTER
        for index, box in enumerate(boxes):
            row, col = divmod(index, columns)
            box.x = col * spacing + rng.uniform(-jitter, jitter)
            box.y = row * spacing + rng.uniform(-jitter, jitter)

    def _apply_forces(
        self,
        boxes: List[TablePosition],
        graph: SchemaGraph,
        index: Dict[str, TablePosition],
        temperature: float,
    ) -> None:
        k_repel = self.settings.LAYOUT_REPULSION
        k_attract = self.settings.LAYOUT_ATTRACTION
        forces = {box.name: [0.0, 0.0] for box in boxes}

        # 斥力：所有表两两之间
        for i in range(len(boxes)):
            a = boxes[i]
            for j in range(i + 1, len(boxes)):
                b = boxes[j]
                dx = a.x - b.x
                dy = a.y - b.y
                distance = math.hypot(dx, dy) or 1.0

                force = k_repel / (distance * distance)
                fx = dx / distance * force
                fy = dy / distance * force
                forces[a.name][0] += fx
                forces[a.name][1] += fy
                forces[b.name][0] -= fx
                forces[b.name][1] -= fy

        # 引力：有关系的表之间
        for a in boxes:
            for neighbor in graph.sorted_neighbors(a.name):
                b = index[neighbor]
                dx = b.x - a.x
                dy = b.y - a.y
                distance = math.hypot(dx, dy) or 1.0

                force = distance * distance / k_attract
                forces[a.name][0] += dx / distance * force
                forces[a.name][1] += dy / distance * force

        # 位移不超过当前温度
        for box in boxes:
            fx, fy = forces[box.name]
            magnitude = math.hypot(fx, fy) or 1.0
            step = min(magnitude, temperature)
            box.x += fx / magnitude * step
            box.y += fy / magnitude * step

    def _apply_force_directed(self, boxes: List[TablePosition], graph: SchemaGraph, rng: random.Random) -> None:
        s = self.settings
        self._initialize_positions(boxes, rng)
        index = {box.name: box for box in boxes}

        temperature = s.LAYOUT_INITIAL_TEMPERATURE
        for _ in range(s.LAYOUT_ITERATIONS):
            self._apply_forces(boxes, graph, index, temperature)
            temperature *= s.LAYOUT_COOLING_FACTOR

        align_to_grid(boxes, s.LAYOUT_GRID_SIZE)
        passes = resolve_overlaps(boxes, s.LAYOUT_MIN_SPACING, s.LAYOUT_OVERLAP_PASSES)
        logger.debug(f"[LayoutEngine] Overlap resolution finished in {passes} pass(es)")
        center_layout(boxes)

    def _apply_circular(self, boxes: List[TablePosition]) -> None:
        """
        环形布局：表中心等角度分布在圆上

        半径取 max(最小半径, n * 每表半径)，并保证相邻表中心距离足以容纳最大的表。
        """
        s = self.settings
        n = len(boxes)
        radius = max(s.LAYOUT_CIRCLE_MIN_RADIUS, n * s.LAYOUT_CIRCLE_RADIUS_PER_TABLE)
        if n > 1:
            chord = math.hypot(
                max(b.width for b in boxes) + s.LAYOUT_MIN_SPACING,
                max(b.height for b in boxes) + s.LAYOUT_MIN_SPACING,
            ) + s.LAYOUT_GRID_SIZE
            radius = max(radius, chord / (2 * math.sin(math.pi / n)))

        angle_step = 2 * math.pi / n
        for index, box in enumerate(boxes):
            angle = index * angle_step
            box.x = math.cos(angle) * radius - box.width / 2
            box.y = math.sin(angle) * radius - box.height / 2
        center_layout(boxes)

    def _assign_levels(self, graph: SchemaGraph) -> Dict[str, int]:
        """无入边（忽略自引用）的表为根，BFS 求到任一根的最短跳数"""
        incoming = graph.incoming_counts()
        roots = [name for name in graph.tables if incoming[name] == 0]

        levels = {root: 0 for root in roots}
        queue = deque(roots)
        while queue:
            current = queue.popleft()
            for successor in graph.sorted_successors(current):
                if successor not in levels:
                    levels[successor] = levels[current] + 1
                    queue.append(successor)
        return levels

    def _apply_hierarchical(self, boxes: List[TablePosition], graph: SchemaGraph) -> None:
        s = self.settings
        levels = self._assign_levels(graph)
        if not levels:
            logger.info("[LayoutEngine] No root tables found, falling back to grid layout")
            self._apply_grid(boxes)
            return

        bands: Dict[int, List[TablePosition]] = {}
        unreachable: List[TablePosition] = []
        for box in boxes:
            if box.name in levels:
                bands.setdefault(levels[box.name], []).append(box)
            else:
                unreachable.append(box)

        y = 0.0
        for level in sorted(bands):
            band = bands[level]
            pitch = max(s.LAYOUT_LEVEL_SPACING, max(b.width for b in band) + s.LAYOUT_MIN_SPACING + s.LAYOUT_GRID_SIZE)
            start = -(len(band) - 1) * pitch / 2
            for i, box in enumerate(band):
                box.x = start + i * pitch - box.width / 2
                box.y = y
            y += max(s.LAYOUT_LEVEL_HEIGHT, max(b.height for b in band) + s.LAYOUT_MIN_SPACING + s.LAYOUT_GRID_SIZE)

        if unreachable:
            logger.debug(f"[LayoutEngine] {len(unreachable)} table(s) unreachable from roots, placed in grid")
            columns = math.ceil(math.sqrt(len(unreachable)))
            pitch_x, pitch_y = self._cell_pitch(unreachable)
            start = -(columns - 1) * pitch_x / 2
            for index, box in enumerate(unreachable):
                row, col = divmod(index, columns)
                box.x = start + col * pitch_x - box.width / 2
                box.y = y + row * pitch_y

        center_layout(boxes)


# 单例
_layout_engine: Optional[LayoutEngine] = None


def get_layout_engine() -> LayoutEngine:
    """获取 LayoutEngine 单例"""
    global _layout_engine
    if _layout_engine is None:
        _layout_engine = LayoutEngine()
    return _layout_engine
