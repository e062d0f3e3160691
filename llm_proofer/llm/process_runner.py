"""Run the model CLI as a subprocess and turn its reply into a side file.

A :class:`ProcessRunner` owns a single run slot. :meth:`ProcessRunner.send`
fills the slot, spawns the model CLI, and returns a :class:`RunHandle` right
away; a worker thread feeds the prompt on stdin, collects stdout until the
process exits, and then completes the run exactly once:

- exit code 0 and a JSON array in the output: the array text is written to
  the side file and the outcome is ``ok``;
- exit code 0 but no balanced array: ``ExtractionFailedError``;
- non-zero exit, a signal, or :meth:`ProcessRunner.cancel`:
  ``ProcessFailureError``.

Failures carry the raw output so the user can inspect what the model said.
"""

from __future__ import annotations

import logging
import signal
import subprocess
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from llm_proofer.config import ProofreaderConfiguration
from llm_proofer.prompt.render_prompt import build_prompt, load_template
from llm_proofer.review.persistence import CorrectionStore

from .errors import (
    AlreadyRunningError,
    ExtractionFailedError,
    LLMProofreaderError,
    ProcessFailureError,
)
from .json_utils import extract_json_array

logger = logging.getLogger(__name__)

CompletionCallback = Callable[["RunOutcome"], None]


@dataclass
class RunOutcome:
    """Result of one completed run."""

    source: Path | None
    output_path: Path
    raw_output: str
    returncode: int | None
    error: LLMProofreaderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RunState:
    """The in-flight run: process handle, output buffer and destination."""

    process: subprocess.Popen
    source: Path | None
    output_path: Path
    output: list[str] = field(default_factory=list)
    future: "Future[RunOutcome]" = field(default_factory=Future)
    cancelled: bool = False
    committed: bool = False

    @property
    def raw_output(self) -> str:
        return "".join(self.output)


class RunHandle:
    """Caller-side view of a run started by :meth:`ProcessRunner.send`."""

    def __init__(self, runner: "ProcessRunner", state: RunState) -> None:
        self._runner = runner
        self._state = state

    @property
    def source(self) -> Path | None:
        return self._state.source

    @property
    def output_path(self) -> Path:
        return self._state.output_path

    def done(self) -> bool:
        return self._state.future.done()

    def wait(self, timeout: float | None = None) -> RunOutcome:
        """Block until the run completes and return its outcome."""
        return self._state.future.result(timeout)

    def cancel(self) -> bool:
        """Kill this run's process if it is still the active one."""
        if self._runner.active is not self._state:
            return False
        return self._runner.cancel()


def describe_exit(returncode: int) -> str:
    """Human-readable termination event for a process exit status."""
    if returncode < 0:
        try:
            name = signal.Signals(-returncode).name
        except ValueError:
            name = str(-returncode)
        return f"killed by signal {name}"
    return f"exited with code {returncode}"


class ProcessRunner:
    """Sends text to the model CLI, one run at a time."""

    def __init__(
        self,
        config: ProofreaderConfiguration | None = None,
        *,
        store: CorrectionStore | None = None,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ) -> None:
        self.config = config or ProofreaderConfiguration()
        self.store = store or CorrectionStore()
        self._popen = popen
        self._active: RunState | None = None
        # Orders cancel() against the decision to write the side file.
        self._commit_lock = threading.Lock()

    @property
    def active(self) -> RunState | None:
        return self._active

    @property
    def is_running(self) -> bool:
        return self._active is not None

    def send(
        self,
        text: str,
        source: Path | None = None,
        on_complete: CompletionCallback | None = None,
    ) -> RunHandle:
        """Start proofreading ``text`` without waiting for the result.

        Args:
            text: Document text (or the selected part of it)
            source: Path of the document the text came from, or None
            on_complete: Called once with the :class:`RunOutcome`

        Raises:
            AlreadyRunningError: If a run is already active
            PromptTemplateError: If the configured template has no text slot
            ProcessFailureError: If the model CLI cannot be started
        """
        if self._active is not None:
            raise AlreadyRunningError(
                f"A proofreading run for {self._active.source or 'unsaved text'} "
                "is still in progress"
            )

        template = load_template(self.config.prompt_template)
        prompt = build_prompt(text, template)
        output_path = self.config.get_output_path(source)
        args = self.config.tool_arguments()

        logger.info("Starting %s for %s", " ".join(args), source or "unsaved text")
        try:
            process = self._popen(
                args,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise ProcessFailureError(
                f"Could not start {args[0]!r}: {exc}", event=str(exc)
            ) from exc

        state = RunState(
            process=process,
            source=Path(source) if source is not None else None,
            output_path=output_path,
        )
        self._active = state

        worker = threading.Thread(
            target=self._run,
            args=(state, prompt, on_complete),
            name="llm-proofer-run",
            daemon=True,
        )
        worker.start()
        return RunHandle(self, state)

    def cancel(self) -> bool:
        """Kill the active subprocess.

        Returns False when nothing is running, or when the run has already
        committed to writing its side file.
        """
        with self._commit_lock:
            state = self._active
            if state is None or state.committed:
                return False
            state.cancelled = True
        try:
            state.process.kill()
        except ProcessLookupError:
            # Already exited; the worker will still report the run as cancelled.
            pass
        logger.info("Cancelled run for %s", state.source or "unsaved text")
        return True

    def _run(
        self,
        state: RunState,
        prompt: str,
        on_complete: CompletionCallback | None,
    ) -> None:
        try:
            stdout, stderr = state.process.communicate(prompt)
            state.output.append(stdout or "")
            outcome = self._complete(state, stderr or "")
        except Exception as exc:
            logger.exception("Run for %s failed unexpectedly", state.source)
            outcome = RunOutcome(
                source=state.source,
                output_path=state.output_path,
                raw_output=state.raw_output,
                returncode=state.process.returncode,
                error=ProcessFailureError(
                    f"Model CLI run failed: {exc}",
                    response_text=state.raw_output,
                    event=str(exc),
                ),
            )
        finally:
            if self._active is state:
                self._active = None

        state.future.set_result(outcome)
        if on_complete is not None:
            on_complete(outcome)

    def _complete(self, state: RunState, stderr: str) -> RunOutcome:
        returncode = state.process.returncode
        raw_output = state.raw_output

        def failed(error: LLMProofreaderError) -> RunOutcome:
            logger.warning("%s", error.args[0])
            return RunOutcome(
                source=state.source,
                output_path=state.output_path,
                raw_output=raw_output,
                returncode=returncode,
                error=error,
            )

        if state.cancelled or returncode != 0:
            event = "cancelled" if state.cancelled else describe_exit(returncode)
            combined = raw_output + (f"\n--- stderr ---\n{stderr}" if stderr else "")
            return failed(
                ProcessFailureError(
                    f"Model CLI {event}",
                    response_text=combined,
                    event=event,
                    returncode=returncode,
                )
            )

        array_text = extract_json_array(raw_output)
        if array_text is None:
            return failed(
                ExtractionFailedError(
                    "No JSON array found in model output", response_text=raw_output
                )
            )

        with self._commit_lock:
            cancelled = state.cancelled
            state.committed = not cancelled
        if cancelled:
            return failed(
                ProcessFailureError(
                    "Model CLI cancelled",
                    response_text=raw_output,
                    event="cancelled",
                    returncode=returncode,
                )
            )

        self.store.write(state.output_path, array_text)
        return RunOutcome(
            source=state.source,
            output_path=state.output_path,
            raw_output=raw_output,
            returncode=returncode,
        )


_default_runner: ProcessRunner | None = None


def get_default_runner(config: ProofreaderConfiguration | None = None) -> ProcessRunner:
    """Return the process-wide runner, creating it on first use."""
    global _default_runner
    if _default_runner is None:
        _default_runner = ProcessRunner(config)
    elif config is not None and not _default_runner.is_running:
        _default_runner.config = config
    return _default_runner
