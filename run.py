"""
Schema Graph Engine 命令行入口

使用方式：
    python run.py schema.json                       # 自动布局 + 分析摘要
    python run.py schema.json --strategy circular   # 指定布局策略
    python run.py schema.json --export csv          # 导出分析结果
    python run.py schema.json --optimize            # 布局后做连线交叉优化
    python run.py schema.json --graph               # 输出渲染层使用的节点/边数据

输入为导入器输出的 JSON：{"tables": [...], "relationships": [...]}
"""
import os
import sys
import json
import argparse
import logging

# 确保项目根目录在 Python 路径中
project_root = os.path.dirname(os.path.abspath(__file__))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

logger = logging.getLogger("run")


def load_schema_file(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def print_layout(result) -> None:
    print(f"\n📐 布局策略: {result.strategy}")
    for position in result.tables:
        print(
            f"   {position.name:<30} x={position.x:>9.1f} y={position.y:>9.1f} "
            f"w={position.width:>6.1f} h={position.height:>6.1f}"
        )
    stats = result.statistics
    print(
        f"   重叠: {stats.overlaps}  交叉: {stats.crossings}  "
        f"布局效率: {stats.layout_efficiency}"
    )


def print_analysis(result) -> None:
    basic = result.basic
    quality = result.quality
    print("\n📊 分析摘要")
    print(f"   表: {basic.total_tables}  列: {basic.total_columns}  关系: {basic.total_relationships}")
    print(f"   连通分量: {result.connectivity.component_count}  网络密度: {result.connectivity.density:.3f}")
    print(f"   质量得分: {quality.overall_score} ({quality.grade})")
    print(f"   复杂度: {result.complexity.classification}")
    for group in result.grouping.groups:
        print(f"   [{group.color}] {group.name}: {', '.join(group.tables)}")
    for rec in quality.recommendations:
        print(f"   ⚠️ [{rec['priority']}] {rec['type']}: {rec['description']}")


def run(
    path: str,
    strategy: str,
    export: str = None,
    optimize: bool = False,
    debug: bool = False,
    graph: bool = False,
) -> int:
    from schemagraph.core.config import get_settings
    from schemagraph.core.logging import setup_logging
    from schemagraph.modules.graph import build_schema_graph, build_visualization_data
    from schemagraph.modules.layout import get_layout_engine
    from schemagraph.modules.report import SchemaQualityReporter

    settings = get_settings()
    setup_logging(debug or settings.DEBUG_MODE)

    try:
        schema = load_schema_file(path)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"无法读取 Schema 文件 {path}: {e}")
        return 1

    engine = get_layout_engine()
    layout = engine.compute_layout(schema, strategy)
    if optimize:
        layout = engine.optimize_crossings(layout, schema)

    if graph:
        positions = {record["name"]: record for record in layout.to_render_records()}
        data = build_visualization_data(build_schema_graph(schema), positions)
        print(json.dumps(data.model_dump(), ensure_ascii=False, indent=2))
        return 0

    reporter = SchemaQualityReporter()
    analysis = reporter.analyze(schema)

    if export:
        output = reporter.export_analysis(export)
        print(output if isinstance(output, str) else json.dumps(output, ensure_ascii=False, indent=2))
        return 0

    print_layout(layout)
    print_analysis(analysis)
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Schema Graph Engine 布局与分析",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  python run.py schema.json
  python run.py schema.json --strategy hierarchical
  python run.py schema.json --export json
        """
    )

    parser.add_argument("schema", help="Schema JSON 文件路径")
    parser.add_argument(
        "--strategy",
        choices=["auto", "force", "grid", "circular", "hierarchical"],
        default="auto",
        help="布局策略 (默认 auto)"
    )
    parser.add_argument(
        "--export",
        choices=["json", "csv"],
        default=None,
        help="以指定格式导出分析结果，而不是打印摘要"
    )
    parser.add_argument(
        "--optimize",
        action="store_true",
        help="布局后交换相邻表以减少连线交叉"
    )
    parser.add_argument(
        "--graph",
        action="store_true",
        help="输出带布局坐标的节点/边 JSON，供渲染层使用"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="调试模式（详细日志）"
    )

    args = parser.parse_args()
    sys.exit(run(args.schema, args.strategy, args.export, args.optimize, args.debug, args.graph))


if __name__ == "__main__":
    main()
