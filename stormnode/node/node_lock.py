from __future__ import annotations

import os
import pathlib


class NodeLockedError(Exception):
    pass


class NodeLock:
    """
    Single-instance guard keyed by node id. The lock is written when the
    broker reports a second connection for the same node id and blocks
    every later start until it is removed.
    """

    def __init__(
        self,
        node_id: str,
        directory: str,
    ) -> None:
        self.node_id = node_id
        self.path = pathlib.Path(directory) / f"storm-node-{node_id}.lock"

    def exists(self) -> bool:
        return self.path.exists()

    def check(self):
        if self.exists():
            raise NodeLockedError(
                f"Err. - lock file exists at {self.path}, remove it before restarting node {self.node_id}."
            )

    def acquire(self, pid: int | None = None) -> pathlib.Path:
        if pid is None:
            pid = os.getpid()

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(str(pid))

        return self.path

    def remove(self) -> bool:
        try:
            self.path.unlink()
            return True

        except FileNotFoundError:
            return False
