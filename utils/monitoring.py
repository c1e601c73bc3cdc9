"""
Monitoring Utilities
Usage counters and process figures for /ping and /stats
"""

import time
from typing import Any, Dict, List, Tuple

import psutil


class Monitoring:
    """In-memory usage counters since startup."""

    def __init__(self, client: Any):
        self.client = client
        self.start_time = time.time()
        self.metrics = {
            "commandsExecuted": 0,
            "messagesProcessed": 0,
            "aiResponses": 0,
            "errors": 0,
        }
        self.command_usage: Dict[str, int] = {}

    def record_command(self, name: str) -> None:
        self.metrics["commandsExecuted"] += 1
        self.command_usage[name] = self.command_usage.get(name, 0) + 1

    def record_message(self) -> None:
        self.metrics["messagesProcessed"] += 1

    def record_ai_response(self) -> None:
        self.metrics["aiResponses"] += 1

    def record_error(self) -> None:
        self.metrics["errors"] += 1

    def uptime_seconds(self) -> int:
        """Seconds since the bot process started monitoring."""
        return int(time.time() - self.start_time)

    def per_hour(self, key: str) -> int:
        """
        Average hourly rate of a counter.

        Args:
            key: Name in ``metrics``

        Returns:
            Rounded rate, 0 during the first second
        """
        hours = (time.time() - self.start_time) / 3600
        return round(self.metrics[key] / hours) if hours > 0 else 0

    def top_commands(self, limit: int = 3) -> List[Tuple[str, int]]:
        """Most used commands, highest count first."""
        ranked = sorted(self.command_usage.items(), key=lambda item: (-item[1], item[0]))
        return ranked[:limit]

    @staticmethod
    def get_memory_mb() -> float:
        """Resident memory of this process in megabytes."""
        return round(psutil.Process().memory_info().rss / 1024 / 1024, 1)
