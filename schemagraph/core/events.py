"""
功能：事件总线 (EventBus)
说明：
    布局引擎和分析引擎在计算完成后通过事件总线通知订阅方（渲染层、报表层等），
    算法代码本身不直接依赖任何 UI 层。

    已使用的事件:
    - layout:complete    载荷为 LayoutResult
    - analysis:complete  载荷为 AnalysisResult
"""
import logging
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]

LAYOUT_COMPLETE = "layout:complete"
ANALYSIS_COMPLETE = "analysis:complete"


class EventBus:
    """
    简单的同步事件总线

    监听器抛出的异常只记录日志，不会影响发布方。
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, event: str, callback: Listener) -> None:
        """订阅事件"""
        self._listeners.setdefault(event, []).append(callback)

    def once(self, event: str, callback: Listener) -> None:
        """订阅事件，触发一次后自动取消；触发前可用原 callback 调用 off 取消"""
        def _once(*args, **kwargs):
            self.off(event, _once)
            return callback(*args, **kwargs)

        _once.__wrapped__ = callback
        self.on(event, _once)

    def off(self, event: str, callback: Optional[Listener] = None) -> None:
        """取消订阅；callback 为 None 时移除该事件的全部监听器"""
        if event not in self._listeners:
            return

        if callback is None:
            del self._listeners[event]
            return

        remaining = [
            cb for cb in self._listeners[event]
            if cb != callback and getattr(cb, "__wrapped__", None) != callback
        ]
        if remaining:
            self._listeners[event] = remaining
        else:
            del self._listeners[event]

    def emit(self, event: str, *args, **kwargs) -> None:
        """同步触发事件"""
        for callback in list(self._listeners.get(event, [])):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"[EventBus] Listener for '{event}' failed: {e}", exc_info=True)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def clear(self) -> None:
        self._listeners.clear()
