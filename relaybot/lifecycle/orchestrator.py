"""在同一个取消域中运行长期服务并协调优雅关闭。"""

from __future__ import annotations

import asyncio
import signal
from enum import Enum
from typing import Protocol, Sequence

from loguru import logger


class Service(Protocol):
    """由编排器管理的长期服务。"""
    
    name: str
    
    async def serve(self, stop: asyncio.Event) -> None:
        """运行直到 stop 被设置，然后排空并返回。"""
        ...


class LifecycleState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class ServiceError(RuntimeError):
    """导致关闭的服务致命错误。"""
    
    def __init__(self, service: str, cause: BaseException | None = None):
        self.service = service
        self.cause = cause
        detail = f"{cause}" if cause is not None else "意外退出"
        super().__init__(f"{service} 服务错误：{detail}")


class LifecycleOrchestrator:
    """
    管理服务任务、共享停止事件和关闭顺序。
    
    状态：IDLE → RUNNING → SHUTTING_DOWN → STOPPED
    
    关闭由信号或任一服务的致命错误触发，只会发生一次。
    run() 在所有服务任务退出后才返回；如果关闭由致命错误
    触发，则在排空后重新引发该错误。
    """
    
    SIGNALS = (signal.SIGINT, signal.SIGTERM)
    
    def __init__(self, services: Sequence[Service], handle_signals: bool = True):
        self.services = list(services)
        self.handle_signals = handle_signals
        self.state = LifecycleState.IDLE
        self.shutdown_reason: str | None = None
        self._stop = asyncio.Event()
        self._error: ServiceError | None = None
    
    @property
    def error(self) -> ServiceError | None:
        return self._error
    
    async def run(self) -> None:
        """启动所有服务并等待它们在关闭后全部退出。"""
        if self.state != LifecycleState.IDLE:
            raise RuntimeError(f"编排器无法从 {self.state.value} 状态启动")
        
        loop = asyncio.get_running_loop()
        installed = self._install_signal_handlers(loop) if self.handle_signals else []
        
        self.state = LifecycleState.RUNNING
        tasks = []
        try:
            for service in self.services:
                logger.info(f"正在启动 {service.name} 服务...")
                tasks.append(asyncio.create_task(self._supervise(service), name=service.name))
            
            await self._stop.wait()
            self.state = LifecycleState.SHUTTING_DOWN
            logger.info(f"正在关闭（{self.shutdown_reason}）...")
        except asyncio.CancelledError:
            self.request_shutdown("已取消")
            self.state = LifecycleState.SHUTTING_DOWN
            raise
        finally:
            # 等待所有服务退出后才算关闭完成
            await asyncio.gather(*tasks, return_exceptions=True)
            for sig in installed:
                loop.remove_signal_handler(sig)
            self.state = LifecycleState.STOPPED
        
        if self._error:
            raise self._error
        logger.info("应用程序已成功停止")
    
    def request_shutdown(self, reason: str, error: ServiceError | None = None) -> bool:
        """
        请求关闭。只有第一次调用生效。
        
        参数:
            reason: 关闭原因，用于日志。
            error: 触发关闭的致命错误（如果有）。
        
        返回:
            如果这次调用触发了关闭则返回 True。
        """
        if self._stop.is_set():
            return False
        
        self.shutdown_reason = reason
        self._error = error
        self._stop.set()
        return True
    
    async def _supervise(self, service: Service) -> None:
        """运行服务，并将其失败或意外退出转换为关闭请求。"""
        try:
            await service.serve(self._stop)
        except Exception as e:
            logger.error(f"{service.name} 服务错误：{e}")
            self.request_shutdown(f"{service.name} 失败", ServiceError(service.name, e))
            return
        
        if not self._stop.is_set():
            logger.error(f"{service.name} 服务意外退出")
            self.request_shutdown(f"{service.name} 已退出", ServiceError(service.name))
            return
        
        logger.info(f"已停止 {service.name} 服务")
    
    def _on_signal(self, sig: signal.Signals) -> None:
        if self.request_shutdown(f"收到信号 {sig.name}"):
            logger.info(f"收到信号 {sig.name}，正在关闭...")
        else:
            logger.debug(f"收到信号 {sig.name}，已在关闭中")
    
    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> list[signal.Signals]:
        installed = []
        for sig in self.SIGNALS:
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
                installed.append(sig)
            except (NotImplementedError, RuntimeError):
                logger.debug(f"此平台不支持 {sig.name} 处理器")
        return installed
