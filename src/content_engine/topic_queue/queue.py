"""Topic queue — newline-delimited text file of pending article topics.

The whole file is rewritten on every mutation. Writes go through a temp file
in the same directory followed by ``os.replace`` so a reader never sees a
half-written queue, and an in-process lock serialises dequeue/requeue.

Usage:
    queue = TopicQueue(Path("data/articles_topics.txt"))
    topic = queue.dequeue()
    ...
    queue.requeue(topic)  # put it back on failure
"""

from __future__ import annotations

import os
import tempfile
import threading
from pathlib import Path

from src.common.errors import EmptyQueue
from src.common.logging import setup_logging

logger = setup_logging(module_name="topic_queue")


class TopicQueue:
    """File-backed FIFO of article topics."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = threading.Lock()

    def dequeue(self) -> str:
        """Remove and return the first line of the queue.

        Returns:
            The first topic, without its line terminator. May be blank if the
            file starts with an empty line.

        Raises:
            EmptyQueue: If the file is missing or empty.
        """
        with self._lock:
            content = self._read()
            if not content:
                raise EmptyQueue(f"No topics in {self.path}")

            first, _, rest = content.partition("\n")
            self._write(rest)

        topic = first.rstrip("\r")
        logger.info("Dequeued topic: %s", topic or "<blank>")
        return topic

    def requeue(self, topic: str) -> None:
        """Put a topic back at the front of the queue."""
        with self._lock:
            content = self._read()
            self._write(f"{topic}\n{content}")
        logger.info("Requeued topic: %s", topic)

    def add(self, topic: str) -> None:
        """Append a topic at the end of the queue."""
        with self._lock:
            content = self._read()
            if content and not content.endswith("\n"):
                content += "\n"
            self._write(f"{content}{topic}\n")
        logger.info("Added topic: %s", topic)

    def pending(self) -> list[str]:
        """Return the non-blank topics currently queued, in order."""
        with self._lock:
            content = self._read()
        return [line.strip() for line in content.splitlines() if line.strip()]

    # --- File I/O ---

    def _read(self) -> str:
        if not self.path.exists():
            return ""
        with open(self.path, encoding="utf-8", newline="") as f:
            return f.read()

    def _write(self, content: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
