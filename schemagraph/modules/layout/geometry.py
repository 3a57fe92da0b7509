"""
布局几何工具：网格吸附、重叠检测与消解、整体居中、线段相交
"""
import logging
import math
from typing import List, Sequence, Tuple

from schemagraph.modules.layout.models import TablePosition

logger = logging.getLogger(__name__)

# 分离后额外留出的距离，保证严格不相交
SEPARATION_EPSILON = 1.0

Point = Tuple[float, float]


def align_to_grid(boxes: Sequence[TablePosition], grid_size: float) -> None:
    if grid_size <= 0:
        return
    for box in boxes:
        box.x = math.floor(box.x / grid_size + 0.5) * grid_size
        box.y = math.floor(box.y / grid_size + 0.5) * grid_size


def boxes_overlap(a: TablePosition, b: TablePosition, margin: float) -> bool:
    """两个表框（各自外扩 margin）是否相交"""
    return not (
        a.x + a.width + margin < b.x
        or b.x + b.width + margin < a.x
        or a.y + a.height + margin < b.y
        or b.y + b.height + margin < a.y
    )


def separate_boxes(a: TablePosition, b: TablePosition, margin: float) -> None:
    """
    沿两框中心连线对称地推开两张表，各移动所需距离的一半

    中心重合时沿 +x 方向分离。
    """
    ax, ay = a.center
    bx, by = b.center
    dx, dy = bx - ax, by - ay
    distance = math.hypot(dx, dy)
    if distance == 0:
        ux, uy = 1.0, 0.0
    else:
        ux, uy = dx / distance, dy / distance

    need_x = (a.width + b.width) / 2 + margin
    need_y = (a.height + b.height) / 2 + margin

    candidates = []
    if abs(ux) > 1e-9:
        candidates.append(need_x / abs(ux))
    if abs(uy) > 1e-9:
        candidates.append(need_y / abs(uy))
    target = min(candidates)

    shift = target - distance + SEPARATION_EPSILON
    if shift <= 0:
        return

    half = shift / 2
    a.x -= ux * half
    a.y -= uy * half
    b.x += ux * half
    b.y += uy * half


def resolve_overlaps(boxes: List[TablePosition], margin: float, max_passes: int) -> int:
    """
    多轮消解重叠，某一轮没有发现重叠即提前结束

    Returns:
        实际执行的轮数
    """
    passes = 0
    for _ in range(max_passes):
        passes += 1
        has_overlap = False
        for i in range(len(boxes)):
            for j in range(i + 1, len(boxes)):
                if boxes_overlap(boxes[i], boxes[j], margin):
                    separate_boxes(boxes[i], boxes[j], margin)
                    has_overlap = True
        if not has_overlap:
            break
    else:
        if count_overlaps(boxes, margin):
            logger.debug(f"[resolve_overlaps] Overlaps remain after {max_passes} passes")
    return passes


def count_overlaps(boxes: Sequence[TablePosition], margin: float) -> int:
    total = 0
    for i in range(len(boxes)):
        for j in range(i + 1, len(boxes)):
            if boxes_overlap(boxes[i], boxes[j], margin):
                total += 1
    return total


def center_layout(boxes: Sequence[TablePosition]) -> None:
    """平移所有表，使整体包围盒中心位于原点"""
    if not boxes:
        return
    min_x = min(b.x for b in boxes)
    min_y = min(b.y for b in boxes)
    max_x = max(b.x + b.width for b in boxes)
    max_y = max(b.y + b.height for b in boxes)

    offset_x = -(min_x + max_x) / 2
    offset_y = -(min_y + max_y) / 2
    for box in boxes:
        box.x += offset_x
        box.y += offset_y


def _orientation(p: Point, q: Point, r: Point) -> int:
    value = (q[1] - p[1]) * (r[0] - q[0]) - (q[0] - p[0]) * (r[1] - q[1])
    if value == 0:
        return 0
    return 1 if value > 0 else 2


def _on_segment(p: Point, q: Point, r: Point) -> bool:
    return (
        min(p[0], r[0]) <= q[0] <= max(p[0], r[0])
        and min(p[1], r[1]) <= q[1] <= max(p[1], r[1])
    )


def segments_intersect(p1: Point, q1: Point, p2: Point, q2: Point) -> bool:
    o1 = _orientation(p1, q1, p2)
    o2 = _orientation(p1, q1, q2)
    o3 = _orientation(p2, q2, p1)
    o4 = _orientation(p2, q2, q1)

    if o1 != o2 and o3 != o4:
        return True

    # 共线特殊情况
    if o1 == 0 and _on_segment(p1, p2, q1):
        return True
    if o2 == 0 and _on_segment(p1, q2, q1):
        return True
    if o3 == 0 and _on_segment(p2, p1, q2):
        return True
    if o4 == 0 and _on_segment(p2, q1, q2):
        return True
    return False
