"""Visual regression coordinator — runs baseline comparisons in isolated worker processes."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import sys
import threading
from collections.abc import Iterable
from pathlib import Path

from src.models.config import VisualRegressionSettings
from src.models.visual_diff import DiffJob, VisualDiff

logger = logging.getLogger(__name__)

WORKER_SCRIPT = Path(__file__).with_name("diff_worker.py")
_PROJECT_ROOT = Path(__file__).resolve().parents[2]

# How long a worker that already answered gets to exit on its own before it is killed.
_REAP_GRACE_SECONDS = 2.0


class EngineSetupError(RuntimeError):
    """The diff worker cannot be found or started, so no comparison can run."""


class DiffAccumulator:
    """Append-only, thread-safe record of comparison results in completion order."""

    def __init__(self) -> None:
        self._diffs: list[VisualDiff] = []
        self._lock = threading.Lock()

    def append(self, diff: VisualDiff) -> None:
        with self._lock:
            self._diffs.append(diff)

    def snapshot(self) -> tuple[VisualDiff, ...]:
        with self._lock:
            return tuple(self._diffs)

    def clear(self) -> None:
        with self._lock:
            self._diffs = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._diffs)


class VisualRegressionCoordinator:
    """Owns the baseline store and significance threshold for one test run.

    Each call to :meth:`compare_against_baseline` spawns a fresh worker
    process, so any number of comparisons can be awaited concurrently.
    """

    def __init__(
        self,
        settings: VisualRegressionSettings | None = None,
        worker_script: Path | None = None,
    ):
        settings = settings or VisualRegressionSettings()
        self.worker_script = worker_script or WORKER_SCRIPT
        self.comparison_timeout = settings.comparison_timeout_seconds
        self.initialize(settings.baselines_dir, settings.diff_threshold)

    def initialize(self, baselines_dir: str | Path, threshold: float) -> None:
        """Start a fresh run: set the baseline store and threshold, drop old results."""
        self.settings = VisualRegressionSettings(
            baselines_dir=str(baselines_dir),
            diff_threshold=threshold,
            comparison_timeout_seconds=self.comparison_timeout,
        )
        self.baselines_dir = Path(self.settings.baselines_dir).resolve()
        self.threshold = self.settings.diff_threshold
        self._diffs = DiffAccumulator()

        if not self.baselines_dir.exists():
            self.baselines_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Created baselines directory %s", self.baselines_dir)

    def get_baseline_path(self, filename: str) -> Path:
        return self.baselines_dir / filename

    async def compare_against_baseline(self, screenshot_path: str | Path, output_dir: str | Path) -> VisualDiff:
        """Compare a screenshot with its baseline in a dedicated worker process.

        Always resolves with a VisualDiff for per-image problems; raises
        EngineSetupError only when the worker itself cannot be launched.
        """
        screenshot_path = Path(screenshot_path).resolve()
        filename = screenshot_path.name
        baseline_path = self.get_baseline_path(filename)
        job = DiffJob(
            baseline_path=str(baseline_path),
            screenshot_path=str(screenshot_path),
            output_dir=str(Path(output_dir).resolve()),
            threshold=self.threshold,
        )

        proc = await self._spawn_worker()
        settled: asyncio.Future[VisualDiff] = asyncio.get_running_loop().create_future()

        def settle(diff: VisualDiff) -> None:
            # First trigger wins; later ones are ignored.
            if not settled.done():
                settled.set_result(diff)

        def fail(reason: str) -> None:
            if settled.done():
                return
            logger.error("Diff worker for %s failed: %s", filename, reason)
            settle(VisualDiff.failed(filename, baseline_path.exists()))

        async def read_response() -> None:
            try:
                proc.stdin.write(job.model_dump_json().encode())
                await proc.stdin.drain()
                proc.stdin.close()
                line = await proc.stdout.readline()
                if line:
                    settle(VisualDiff.model_validate_json(line))
            except Exception as e:
                fail(f"bad response: {e}")

        async def relay_stderr() -> None:
            async for raw in proc.stderr:
                logger.debug("[worker %s] %s", filename, raw.decode(errors="replace").rstrip())

        async def watch_exit(reader: asyncio.Task) -> None:
            code = await proc.wait()
            if code != 0:
                fail(f"exited with code {code}")
                return
            await asyncio.wait([reader])
            fail("exited without a response")

        reader = asyncio.create_task(read_response())
        tasks = [reader, asyncio.create_task(relay_stderr()), asyncio.create_task(watch_exit(reader))]

        timed_out = False
        try:
            diff = await asyncio.wait_for(asyncio.shield(settled), timeout=self.comparison_timeout)
        except asyncio.TimeoutError:
            timed_out = True
            fail(f"no result within {self.comparison_timeout}s")
            diff = settled.result()
        finally:
            await self._reap(proc, tasks, grace=not timed_out)

        self._diffs.append(diff)
        return diff

    async def compare_all(self, screenshot_paths: Iterable[str | Path], output_dir: str | Path) -> list[VisualDiff]:
        """Run comparisons concurrently; results follow the input order."""
        return list(await asyncio.gather(
            *(self.compare_against_baseline(p, output_dir) for p in screenshot_paths)
        ))

    async def _spawn_worker(self) -> asyncio.subprocess.Process:
        if not self.worker_script.exists():
            raise EngineSetupError(f"Diff worker not found at {self.worker_script}")

        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(p for p in (str(_PROJECT_ROOT), env.get("PYTHONPATH")) if p)
        env["UI_VERIFY_WORKER_LOG_LEVEL"] = logging.getLevelName(logger.getEffectiveLevel())
        try:
            return await asyncio.create_subprocess_exec(
                sys.executable, str(self.worker_script),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except OSError as e:
            raise EngineSetupError(f"Could not start diff worker {self.worker_script}: {e}") from e

    async def _reap(self, proc: asyncio.subprocess.Process, tasks: list[asyncio.Task], grace: bool) -> None:
        if proc.returncode is None and grace:
            try:
                await asyncio.wait_for(proc.wait(), timeout=_REAP_GRACE_SECONDS)
            except asyncio.TimeoutError:
                pass
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.wait()
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def promote_to_baseline(self, screenshot_path: str | Path) -> Path:
        """Copy a screenshot into the baseline store, replacing any existing baseline."""
        screenshot_path = Path(screenshot_path)
        dest = self.get_baseline_path(screenshot_path.name)
        shutil.copy2(screenshot_path, dest)
        logger.info("Saved %s as baseline", screenshot_path.name)
        return dest

    def promote_all(self, screenshot_paths: Iterable[str | Path]) -> list[Path]:
        promoted = [self.promote_to_baseline(p) for p in screenshot_paths]
        logger.info("Saved %d screenshots as baselines", len(promoted))
        return promoted

    def get_accumulated_diffs(self) -> tuple[VisualDiff, ...]:
        return self._diffs.snapshot()

    def get_significant_changes(self) -> tuple[VisualDiff, ...]:
        return tuple(d for d in self._diffs.snapshot() if d.has_significant_change)

    def clear_diffs(self) -> None:
        self._diffs.clear()
