from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache
from dotenv import load_dotenv
import os

# 显式加载项目根目录下的 .env（若存在）
base_dir = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
env_path = os.path.join(base_dir, ".env")
if os.path.exists(env_path):
    load_dotenv(env_path, override=True)
else:
    load_dotenv()


class Settings(BaseSettings):
    """
    Schema Graph Engine 全局配置

    配置优先级: 环境变量 > .env 文件 > 默认值
    """

    # ===========================================
    # 项目基础配置
    # ===========================================
    PROJECT_NAME: str = "Schema Graph Engine"
    VERSION: str = "0.1.0"

    # ===========================================
    # 布局算法选择
    # ===========================================
    LAYOUT_FORCE_MAX_TABLES: int = 5            # 超过该表数量时自动布局改用网格

    # ===========================================
    # 力导向布局参数
    # ===========================================
    LAYOUT_ITERATIONS: int = 100                # 迭代次数
    LAYOUT_INITIAL_TEMPERATURE: float = 100.0   # 初始温度（单次最大位移）
    LAYOUT_COOLING_FACTOR: float = 0.95         # 每轮降温系数
    LAYOUT_REPULSION: float = 5000.0            # 斥力常数 k_repel
    LAYOUT_ATTRACTION: float = 1000.0           # 引力常数 k_attract
    LAYOUT_JITTER: float = 50.0                 # 初始位置随机扰动半宽

    # 随机种子，None 表示使用真随机（需显式开启）
    LAYOUT_RANDOM_SEED: Optional[int] = 42

    # ===========================================
    # 对齐 / 间距 / 重叠消解
    # ===========================================
    LAYOUT_GRID_SIZE: int = 20                  # 网格吸附步长
    LAYOUT_MIN_SPACING: int = 50                # 表之间的最小间距
    LAYOUT_CELL_SPACING: int = 300              # 网格布局单元间距
    LAYOUT_OVERLAP_PASSES: int = 10             # 重叠消解最大轮数

    # ===========================================
    # 环形 / 层次布局
    # ===========================================
    LAYOUT_CIRCLE_MIN_RADIUS: float = 200.0
    LAYOUT_CIRCLE_RADIUS_PER_TABLE: float = 30.0
    LAYOUT_LEVEL_HEIGHT: int = 150              # 层次布局每层最小高度
    LAYOUT_LEVEL_SPACING: int = 250             # 同层表之间的最小水平间距

    # ===========================================
    # 图分析配置
    # ===========================================
    # Floyd-Warshall 为 O(T^3)，超过该表数量时跳过最短路径计算
    ANALYSIS_SHORTEST_PATH_MAX_TABLES: int = 300
    # Jaccard 相似度扫描为 O(T^2)，超过该表数量时跳过继承模式识别
    ANALYSIS_SIMILARITY_MAX_TABLES: int = 200
    ANALYSIS_SIMILARITY_THRESHOLD: float = 0.7
    ANALYSIS_LARGE_TABLE_COLUMNS: int = 50

    # ===========================================
    # 调试模式
    # ===========================================
    DEBUG_MODE: bool = False

    class Config:
        # 依赖上方 load_dotenv 加载的环境变量
        env_file = None
        case_sensitive = True


@lru_cache()
def get_settings():
    return Settings()
