"""Advisor process lifecycle: spawn, stream workers, liveness and teardown."""

from __future__ import annotations

import os
import subprocess
import threading
import time
import weakref
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO

from loguru import logger

from .channel import Channel, ChannelClosed
from .errors import StartFailedError
from .framing import FrameBuffer

REPL_FLAG = "--repl"
DEFAULT_SETTLE_DELAY = 0.5
WORKER_JOIN_TIMEOUT = 2.0
KILL_WAIT_TIMEOUT = 5.0

# Keeps the child from opening a console window on Windows.
_CREATE_NO_WINDOW = 0x08000000


@dataclass
class Generation:
    """One spawned advisor and everything bound to it; created and destroyed as a unit."""

    number: int
    process: subprocess.Popen[str]
    outgoing: Channel[str]
    incoming: Channel[str]
    workers: list[threading.Thread] = field(default_factory=list)


def _writer_loop(stdin: IO[str], outgoing: Channel[str]) -> None:
    while True:
        try:
            message = outgoing.recv()
        except ChannelClosed:
            break
        try:
            stdin.write(message)
            stdin.flush()
        except (OSError, ValueError) as exc:
            logger.debug("Advisor stdin write failed: {}", exc)
            break
    outgoing.close()
    try:
        stdin.close()
    except (OSError, ValueError):
        pass


def _reader_loop(stdout: IO[str], incoming: Channel[str]) -> None:
    frames = FrameBuffer()
    try:
        for line in stdout:
            for message in frames.feed(line):
                try:
                    incoming.send(message)
                except ChannelClosed:
                    return
    except (OSError, ValueError) as exc:
        logger.debug("Advisor stdout read failed: {}", exc)
    finally:
        incoming.close()


def _stderr_loop(stderr: IO[str]) -> None:
    try:
        for line in stderr:
            text = line.rstrip()
            if text:
                logger.debug("[advisor] {}", text)
    except (OSError, ValueError):
        pass


def _kill_process(process: subprocess.Popen[str]) -> None:
    try:
        process.kill()
    except OSError as exc:
        logger.warning("Failed to kill advisor pid={}: {}", process.pid, exc)
    try:
        process.wait(timeout=KILL_WAIT_TIMEOUT)
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.warning("Advisor pid={} did not exit after kill: {}", process.pid, exc)


def _reap_on_finalize(holder: dict[str, Generation | None]) -> None:
    generation = holder.get("current")
    if generation is None:
        return
    holder["current"] = None
    generation.outgoing.close()
    if generation.process.poll() is None:
        _kill_process(generation.process)


class ProcessSupervisor:
    """Owns the advisor process and its writer/reader/diagnostic workers."""

    def __init__(
        self,
        advisor_path: str | Path,
        *,
        args: Sequence[str] = (REPL_FLAG,),
        env: Mapping[str, str] | None = None,
        cwd: str | Path | None = None,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
    ):
        self.advisor_path = Path(advisor_path)
        self.args = list(args)
        self.env = dict(env) if env is not None else None
        self.cwd = str(cwd) if cwd is not None else None
        self.settle_delay = settle_delay
        self._generation_count = 0
        # Held in a dict so the finalizer can see the current generation without referencing self.
        self._holder: dict[str, Generation | None] = {"current": None}
        self._finalizer = weakref.finalize(self, _reap_on_finalize, self._holder)

    @property
    def current(self) -> Generation | None:
        return self._holder["current"]

    @property
    def generation(self) -> int:
        """Number of the live generation, or of the last one started."""
        return self._generation_count

    @property
    def pid(self) -> int | None:
        current = self.current
        return current.process.pid if current else None

    @property
    def outgoing(self) -> Channel[str] | None:
        current = self.current
        return current.outgoing if current else None

    @property
    def incoming(self) -> Channel[str] | None:
        current = self.current
        return current.incoming if current else None

    def command(self) -> list[str]:
        return [str(self.advisor_path), *self.args]

    def is_running(self) -> bool:
        """Poll the advisor; an exited process is torn down as a side effect."""
        current = self.current
        if current is None:
            return False
        if current.process.poll() is None:
            return True
        logger.info(
            "Advisor exited (pid={}, code={})",
            current.process.pid,
            current.process.returncode,
        )
        self._teardown()
        return False

    def start(self) -> None:
        """Spawn the advisor and its workers; no-op while one is running."""
        if self.is_running():
            return

        command = self.command()
        logger.info("Starting advisor: {}", command)
        popen_kwargs: dict[str, int] = {}
        if os.name == "nt":
            popen_kwargs["creationflags"] = _CREATE_NO_WINDOW
        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
                cwd=self.cwd,
                env=self.env,
                **popen_kwargs,
            )
        except (OSError, ValueError) as exc:
            raise StartFailedError(str(exc)) from exc

        missing = [
            name
            for name, stream in (("stdin", process.stdin), ("stdout", process.stdout), ("stderr", process.stderr))
            if stream is None
        ]
        if missing:
            _kill_process(process)
            raise StartFailedError(f"Failed to capture {', '.join(missing)}")

        self._generation_count += 1
        generation = Generation(
            number=self._generation_count,
            process=process,
            outgoing=Channel("advisor-stdin"),
            incoming=Channel("advisor-stdout"),
        )
        generation.workers = [
            threading.Thread(
                target=_writer_loop,
                args=(process.stdin, generation.outgoing),
                name=f"advisor-writer-{generation.number}",
                daemon=True,
            ),
            threading.Thread(
                target=_reader_loop,
                args=(process.stdout, generation.incoming),
                name=f"advisor-reader-{generation.number}",
                daemon=True,
            ),
            threading.Thread(
                target=_stderr_loop,
                args=(process.stderr,),
                name=f"advisor-stderr-{generation.number}",
                daemon=True,
            ),
        ]
        for worker in generation.workers:
            worker.start()
        self._holder["current"] = generation

        if self.settle_delay > 0:
            time.sleep(self.settle_delay)
        dropped = generation.incoming.drain()
        if dropped:
            logger.debug("Dropped {} startup message(s) from advisor", len(dropped))

        logger.info("Advisor started (pid={}, generation={})", process.pid, generation.number)

    def stop(self) -> None:
        """Kill the advisor if present and clear every handle. Never raises."""
        current = self.current
        if current is not None:
            logger.info("Stopping advisor (pid={})", current.process.pid)
            if current.process.poll() is None:
                _kill_process(current.process)
        self._teardown()

    def restart(self) -> None:
        self.stop()
        self.start()

    def close(self) -> None:
        self.stop()

    def _teardown(self) -> None:
        current = self.current
        self._holder["current"] = None
        if current is None:
            return
        current.outgoing.close()
        current.incoming.close()
        for worker in current.workers:
            if worker is not threading.current_thread():
                worker.join(timeout=WORKER_JOIN_TIMEOUT)
        _, reader, diagnostic = current.workers
        # A stream can only be closed once its worker is done reading it.
        for stream, worker in ((current.process.stdout, reader), (current.process.stderr, diagnostic)):
            if stream is None:
                continue
            if worker.is_alive():
                logger.warning("{} still running after advisor teardown", worker.name)
                continue
            try:
                stream.close()
            except (OSError, ValueError):
                pass

    def __enter__(self) -> "ProcessSupervisor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
