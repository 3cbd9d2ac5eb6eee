import logging
import sys
from functools import lru_cache
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Literal, Optional

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_LOG_FILENAME = "proposal_pricing.log"

# Symbols used to draw the pipeline flow
FLOW_SYMBOLS = {
    "start": "╔",
    "node": "║",
    "arrow": "→",
    "end": "╚",
    "route": "◆",
}


def _configure_root_logger(level: LogLevel, log_dir: Optional[str]) -> None:
    """Attach console (and optional daily rotating file) handlers once."""
    root = logging.getLogger()
    if root.handlers:
        return

    formatter = logging.Formatter(_LOG_FORMAT, _DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)
    root.setLevel(level)

    if log_dir:
        try:
            path = Path(log_dir)
            path.mkdir(parents=True, exist_ok=True)
            file_handler = TimedRotatingFileHandler(
                path / _LOG_FILENAME,
                when="midnight",
                interval=1,
                backupCount=7,
                encoding="utf-8",
            )
        except OSError as e:
            root.warning(f"File logging disabled, cannot write to {log_dir}: {e}")
        else:
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)


@lru_cache(maxsize=128)
def get_logger(name: str) -> logging.Logger:
    """
    Return a logger for ``name`` with the root logger configured.

    Usage:
        from proposal_pricing.core.logging import get_logger
        logger = get_logger(__name__)
        logger.info("Message")
    """
    from proposal_pricing.core.config import settings

    _configure_root_logger(settings.log_level, settings.log_dir)
    return logging.getLogger(name)


class PipelineLogger:
    """Tracing logger for the LangGraph pricing pipeline."""

    def __init__(self, component: str):
        self._logger = get_logger(f"pipeline.{component}")
        self.component = component

    def pipeline_start(self, calculation_id: str, base_cost: float, mode: str) -> None:
        self._logger.info("=" * 70)
        self._logger.info(f"{FLOW_SYMBOLS['start']}══ PRICING START ═══════════════════════════════════════════════════")
        self._logger.info(f"{FLOW_SYMBOLS['node']} Calculation: {calculation_id} | Base cost: {base_cost:,.2f} | Mode: {mode}")
        self._logger.info("=" * 70)

    def pipeline_end(
        self,
        calculation_id: str,
        total_cost: float,
        execution_time_ms: float,
        warning_count: int,
        sequence: list,
    ) -> None:
        self._logger.info("=" * 70)
        self._logger.info(f"{FLOW_SYMBOLS['end']}══ PRICING COMPLETE ════════════════════════════════════════════════")
        self._logger.info(f"   {FLOW_SYMBOLS['route']} Calculation: {calculation_id}")
        self._logger.info(f"   {FLOW_SYMBOLS['route']} Total cost: {total_cost:,.2f}")
        self._logger.info(f"   {FLOW_SYMBOLS['route']} Stages: {' → '.join(sequence)}")
        self._logger.info(f"   {FLOW_SYMBOLS['route']} Warnings: {warning_count} | Time: {execution_time_ms:.2f} ms")
        self._logger.info("=" * 70)

    def node_enter(self, node: str, calculation_id: Optional[str] = None) -> None:
        self._logger.debug(f"{FLOW_SYMBOLS['node']} [{node.upper()}] {FLOW_SYMBOLS['arrow']} Entering | calc: {calculation_id or 'N/A'}")

    def node_exit(self, node: str, result: Optional[str] = None) -> None:
        self._logger.debug(f"{FLOW_SYMBOLS['node']} [{node.upper()}] {FLOW_SYMBOLS['arrow']} Exiting | {result or 'OK'}")

    def routing_decision(self, from_node: str, to_node: str, reason: str) -> None:
        self._logger.debug(f"{FLOW_SYMBOLS['route']} ROUTING: {from_node} → {to_node} | Reason: {reason}")

    def stage_degraded(self, node: str, reason: str) -> None:
        self._logger.warning(f"{FLOW_SYMBOLS['node']} [{node.upper()}] DEGRADED: {reason}")

    def error(self, node: str, error: Exception) -> None:
        self._logger.error(f"{FLOW_SYMBOLS['node']} [{node.upper()}] ERROR: {type(error).__name__}: {error}", exc_info=True)

    def debug(self, node: str, message: str) -> None:
        self._logger.debug(f"{FLOW_SYMBOLS['node']} [{node}] {message}")
