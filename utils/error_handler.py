"""
Error Handler
Global error handling and reporting
"""

import asyncio
import signal
import time
import traceback
from typing import Any, Awaitable, Callable, Dict, Optional

import discord
import psutil

from utils.logger import get_logger

logger = get_logger("ErrorHandler")

ShutdownCallback = Callable[[], Awaitable[None]]


class ErrorHandler:
    """Global error handler for the bot."""

    def __init__(self, max_errors_per_minute: int = 10):
        self.logger = get_logger("ErrorHandler")
        self.error_counts: Dict[str, int] = {}
        self.circuit_breakers: Dict[str, float] = {}
        self.max_errors_per_minute = max_errors_per_minute
        self._cleanup_task: Optional[asyncio.Task] = None
        self._on_shutdown: Optional[ShutdownCallback] = None
        self._shutting_down = False

    def initialize(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        on_shutdown: Optional[ShutdownCallback] = None,
    ) -> None:
        """
        Initialize global error handlers.

        Args:
            loop: Event loop to attach to (default: running loop)
            on_shutdown: Coroutine function awaited when a stop signal arrives
        """
        if loop is None:
            loop = asyncio.get_running_loop()

        self._on_shutdown = on_shutdown
        loop.set_exception_handler(self._async_exception_handler)

        try:
            loop.add_signal_handler(signal.SIGINT, self._signal_handler, signal.SIGINT)
            loop.add_signal_handler(signal.SIGTERM, self._signal_handler, signal.SIGTERM)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

        self._cleanup_task = loop.create_task(self._periodic_cleanup())

        self.logger.info("Error handlers initialized")

    def _signal_handler(self, sig: signal.Signals) -> None:
        """Handle shutdown signals."""
        if self._shutting_down:
            return
        self._shutting_down = True
        self.logger.info(f"Received signal {sig.name}, shutting down...")
        asyncio.create_task(self._run_shutdown())

    async def _run_shutdown(self) -> None:
        if self._on_shutdown:
            try:
                await self._on_shutdown()
            except Exception as e:
                self.handle_exception(e, "shutdown")
        await self.shutdown()

    def _async_exception_handler(self, loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        """Handle async exceptions."""
        exception = context.get("exception")
        if exception:
            self.handle_exception(exception, "async")
        else:
            message = context.get("message", "Unknown async error")
            self.logger.error(f"Async error: {message}")

    def handle_exception(self, error: BaseException, context: str = "") -> bool:
        """
        Handle an exception.

        Args:
            error: The exception that occurred
            context: Optional context string

        Returns:
            True if error count exceeded threshold (circuit broken)
        """
        error_key = f"{context}:{type(error).__name__}"

        if context:
            self.logger.error(f"[{context}] {type(error).__name__}: {error}")
        else:
            self.logger.error(f"{type(error).__name__}: {error}")

        self.logger.debug(
            "Traceback:\n" + "".join(traceback.format_exception(type(error), error, error.__traceback__))
        )

        count = self.error_counts.get(error_key, 0) + 1
        self.error_counts[error_key] = count

        if count >= self.max_errors_per_minute:
            self.logger.warning(f"Circuit breaker triggered for: {context}")
            self.circuit_breakers[context] = self._now() + 60  # Block for 1 minute
            return True

        return False

    def is_circuit_broken(self, context: str) -> bool:
        """Check if a context is circuit broken."""
        break_until = self.circuit_breakers.get(context)
        if not break_until:
            return False

        if self._now() > break_until:
            # Circuit breaker expired
            del self.circuit_breakers[context]
            for key in [k for k in self.error_counts if k.startswith(f"{context}:")]:
                del self.error_counts[key]
            return False

        return True

    @staticmethod
    def _now() -> float:
        try:
            return asyncio.get_running_loop().time()
        except RuntimeError:
            return time.monotonic()

    async def _periodic_cleanup(self) -> None:
        """Periodically clean up error counts."""
        while True:
            try:
                await asyncio.sleep(60)
                self._cleanup_error_counts()
            except asyncio.CancelledError:
                break

    def _cleanup_error_counts(self) -> None:
        """Clean up old error counts."""
        if self.error_counts:
            self.logger.debug("Error counts cleaned up")
        self.error_counts.clear()

    async def report_interaction_error(
        self,
        interaction: Any,
        error: BaseException,
        context: str = "",
        message: str = "❌ Something went wrong while running that command.",
    ) -> None:
        """
        Log an interaction failure and tell the user about it ephemerally.

        Args:
            interaction: Discord interaction that failed
            error: The exception that occurred
            context: Context string (usually the command name)
            message: Text shown to the user
        """
        self.handle_exception(error, context)

        try:
            if interaction.response.is_done():
                await interaction.followup.send(message, ephemeral=True)
            else:
                await interaction.response.send_message(message, ephemeral=True)
        except discord.HTTPException as e:
            self.logger.warning(f"Could not report error to user: {e}")

    def log_system_state(self) -> None:
        """Log memory use and error bookkeeping."""
        memory = psutil.Process().memory_info()
        self.logger.info(
            "System state: "
            f"memory={memory.rss / 1024 / 1024:.1f}MB, "
            f"errors={sum(self.error_counts.values())}, "
            f"circuits={len(self.circuit_breakers)}"
        )

    async def shutdown(self) -> None:
        """Clean shutdown."""
        self.logger.info("Shutting down error handler...")

        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None

        self.error_counts.clear()
        self.circuit_breakers.clear()

# Global error handler instance
_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    global _error_handler
    if _error_handler is None:
        _error_handler = ErrorHandler()
    return _error_handler


def setup_error_handler(
    loop: Optional[asyncio.AbstractEventLoop] = None,
    on_shutdown: Optional[ShutdownCallback] = None,
) -> ErrorHandler:
    """Set up the global error handler."""
    handler = get_error_handler()
    handler.initialize(loop, on_shutdown)
    return handler
