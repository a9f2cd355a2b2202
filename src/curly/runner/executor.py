"""Run a prepared command one or more times and collect statistics."""

import signal
import subprocess
import threading
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager

import click

from curly.errors import CommandFailed, ExecutionCancelled

_output_lock = threading.Lock()


class ExecutionStats:
    """Thread-safe success/failure counters for a multi-run."""

    def __init__(self, total: int):
        self.total = total
        self.success = 0
        self.failed = 0
        self.errors: list[str] = []
        self.start_time = time.monotonic()
        self.end_time: float | None = None
        self._lock = threading.Lock()

    def record_success(self) -> None:
        with self._lock:
            self.success += 1

    def record_failure(self, error: Exception) -> None:
        with self._lock:
            self.failed += 1
            self.errors.append(str(error))

    def finish(self) -> None:
        self.end_time = time.monotonic()

    @property
    def duration(self) -> float:
        end = self.end_time if self.end_time is not None else time.monotonic()
        return end - self.start_time

    def summary_lines(self) -> list[str]:
        duration = self.duration
        lines = [
            "",
            "Summary:",
            f"  Total:      {self.total}",
            f"  Success:    {self.success}",
            f"  Failed:     {self.failed}",
            f"  Duration:   {_ms(duration)}",
        ]
        if self.total > 0:
            lines.append(f"  Avg time:   {_ms(duration / self.total)}")
            if duration > 0:
                lines.append(f"  Throughput: {self.total / duration:.2f} req/s")

        if self.errors:
            lines += ["", "Errors:"]
            for message, count in Counter(self.errors).items():
                lines.append(f"  [{count}x] {message}" if count > 1 else f"  {message}")
        return lines

    def print(self) -> None:
        for line in self.summary_lines():
            click.echo(line, err=True)


def _ms(seconds: float) -> str:
    return f"{round(seconds * 1000)}ms"


def run_shell_command(command: str) -> None:
    """Run ``command`` with ``sh -c`` and echo its combined output.

    Raises CommandFailed on a non-zero exit status.
    """
    result = subprocess.run(
        ["sh", "-c", command],
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
    )
    with _output_lock:
        click.echo(result.stdout)
    if result.returncode != 0:
        raise CommandFailed(f"command exited with error: exit status {result.returncode}")


@contextmanager
def _cancel_on_signal(cancelled: threading.Event):
    """Set ``cancelled`` on SIGINT/SIGTERM while the block runs."""

    def handler(signum, frame):
        click.echo("\nReceived interrupt signal, cancelling...", err=True)
        cancelled.set()

    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = {sig: signal.signal(sig, handler) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        yield
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old if old is not None else signal.SIG_DFL)


def execute(
    command: str,
    times: int = 1,
    parallel: int = 1,
    delay: float = 0,
    verbose: bool = False,
    cancelled: threading.Event | None = None,
) -> ExecutionStats:
    """Run ``command`` ``times`` times in batches of at most ``parallel``.

    Sequential runs stop at the first failure; parallel runs record
    failures and carry on. A summary is printed for multi-runs in
    verbose mode, or whenever a multi-run is cut short.
    """
    parallel = max(1, min(parallel, times))
    cancelled = cancelled or threading.Event()
    stats = ExecutionStats(total=times)

    if verbose and times > 1:
        if parallel > 1:
            click.echo(f"Running {times} requests ({parallel} concurrent per batch)...", err=True)
        else:
            click.echo(f"Running {times} requests sequentially...", err=True)

    def stop(error: Exception):
        stats.finish()
        if times > 1:
            stats.print()
        return error

    def run_one() -> None:
        if cancelled.is_set():
            return
        try:
            run_shell_command(command)
        except CommandFailed as e:
            stats.record_failure(e)
            if verbose:
                click.echo(f"command execution failed: {e}", err=True)
        else:
            stats.record_success()

    batches = -(-times // parallel)
    remaining = times
    completed = 0

    with _cancel_on_signal(cancelled):
        for batch in range(batches):
            if cancelled.is_set():
                raise stop(ExecutionCancelled("execution cancelled"))
            if batch > 0 and delay > 0:
                time.sleep(delay)

            size = min(remaining, parallel)
            remaining -= size

            if parallel > 1:
                with ThreadPoolExecutor(max_workers=size) as pool:
                    for future in [pool.submit(run_one) for _ in range(size)]:
                        future.result()
            else:
                try:
                    run_shell_command(command)
                except CommandFailed as e:
                    stats.record_failure(e)
                    raise stop(CommandFailed(f"command execution failed: {e}")) from e
                stats.record_success()

            completed += size
            if verbose and times > 1:
                click.echo(f"Progress: {completed}/{times} ({completed / times * 100:.1f}%)", err=True)

    stats.finish()
    if verbose and times > 1:
        stats.print()
    return stats
