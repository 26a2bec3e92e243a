"""The benchmark: traditional vs generated logging against a null sink.

Both methods log the same record at INFORMATION and produce no output.
The traditional call packs and boxes its arguments before the sink can
reject the record. The generated call checks is_enabled first and passes
the arguments through as they are.
"""

from __future__ import annotations

from logbench.abstractions import Logger, LogLevel
from logbench.extensions import log_information
from logbench.generator import logger_message
from logbench.harness import benchmark, memory_diagnoser
from logbench.null_logger import NullLogger

HANDLE_REQUEST_TEMPLATE = "Handled request {RequestName} for user {UserId} in {ElapsedMs}ms"

REQUEST_NAME = "GetUser"
USER_ID = 123
ELAPSED_MS = 45.67


@logger_message(event_id=1, level=LogLevel.INFORMATION, message=HANDLE_REQUEST_TEMPLATE)
def handle_request(
    logger: Logger, request_name: str, user_id: int, elapsed_ms: float
) -> None:
    """Log a handled request."""


@memory_diagnoser
class LoggingBenchmark:
    """Same record, two call paths."""

    def __init__(self, logger: Logger | None = None) -> None:
        self._logger = logger if logger is not None else NullLogger()

    @benchmark(baseline=True, description="template + variadic args, boxed")
    def traditional_logger(self) -> None:
        log_information(
            self._logger, HANDLE_REQUEST_TEMPLATE, REQUEST_NAME, USER_ID, ELAPSED_MS
        )

    @benchmark(description="generated, strongly typed")
    def source_generated_logger(self) -> None:
        handle_request(self._logger, REQUEST_NAME, USER_ID, ELAPSED_MS)
