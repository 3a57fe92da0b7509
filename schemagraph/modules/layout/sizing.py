"""
表尺寸估算

宽度按表名长度和最长的 (列名 + 类型) 估算，并限制在 [MIN_WIDTH, MAX_WIDTH]；
高度与列数严格线性。尺寸只取决于表本身，同一张表多次计算结果一致。
"""
from typing import Tuple

from schemagraph.schemas.schema import TableSchema

MIN_WIDTH = 150
MAX_WIDTH = 350

HEADER_HEIGHT = 30
ROW_HEIGHT = 25
PADDING = 10

NAME_CHAR_WIDTH = 8
NAME_PADDING = 40
COLUMN_CHAR_WIDTH = 7
COLUMN_PADDING = 60


def estimate_table_width(table: TableSchema) -> float:
    longest_pair = 0
    for column in table.columns:
        longest_pair = max(longest_pair, len(column.name) + len(column.data_type))

    estimated = max(
        len(table.name) * NAME_CHAR_WIDTH + NAME_PADDING,
        longest_pair * COLUMN_CHAR_WIDTH + COLUMN_PADDING,
    )
    return float(max(MIN_WIDTH, min(MAX_WIDTH, estimated)))


def estimate_table_height(table: TableSchema) -> float:
    return float(HEADER_HEIGHT + len(table.columns) * ROW_HEIGHT + PADDING)


def estimate_table_size(table: TableSchema) -> Tuple[float, float]:
    return estimate_table_width(table), estimate_table_height(table)
