# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Backup archive management for the primary data store.
"""
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import IO, Callable, List, Optional, Tuple

from ..MODELS.invocation import Invocation
from ..RUNNERS.command_dispatcher import CommandDispatcher

logger = logging.getLogger(__name__)


@dataclass
class BackupResult:
    """Outcome of a backup run."""

    exit_code: int
    path: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


class BackupManager:
    """
    Writes database dumps to timestamped files. An existing archive is
    never overwritten; a second backup in the same second gets a suffix.
    """
    FILENAME_FORMAT = "backup-%Y%m%d-%H%M%S"
    EXTENSION = ".archive"

    def __init__(self, backup_dir: str = "backups",
                 clock: Callable[[], datetime] = datetime.now):
        """
        :param backup_dir: Directory archives are written to. Created on demand.
        :param clock: Source of the timestamp used in file names.
        """
        self.backup_dir = backup_dir
        self.clock = clock

    def filename_for(self, moment: datetime, attempt: int = 0) -> str:
        stem = moment.strftime(self.FILENAME_FORMAT)
        if attempt:
            stem = f"{stem}-{attempt}"
        return stem + self.EXTENSION

    def reserve(self) -> Tuple[str, IO[bytes]]:
        """
        Creates a new, empty archive file.

        :return: The file's path and an open binary handle to it.
        """
        os.makedirs(self.backup_dir, exist_ok=True)
        moment = self.clock()
        attempt = 0
        while True:
            path = os.path.join(self.backup_dir, self.filename_for(moment, attempt))
            try:
                return path, open(path, 'xb')
            except FileExistsError:
                attempt += 1

    def create(self, dispatcher: CommandDispatcher, invocation: Invocation) -> BackupResult:
        """
        Runs a dump invocation with its stdout going into a new archive.
        A failed dump leaves no archive behind.

        :param dispatcher: Runs the dump.
        :param invocation: Dump command writing the archive to stdout.
        :return: Exit code and, on success, the archive path.
        """
        path, handle = self.reserve()
        logger.debug("Writing backup to %s", path)
        try:
            with handle:
                exit_code = dispatcher.dispatch(invocation, stdout=handle)
        except Exception:
            os.remove(path)
            raise

        if exit_code != 0:
            logger.debug("Dump failed with %s, removing %s", exit_code, path)
            os.remove(path)
            return BackupResult(exit_code=exit_code)
        return BackupResult(exit_code=0, path=path)

    def list_backups(self) -> List[str]:
        """
        Archive paths in the backup directory, oldest first.
        """
        if not os.path.isdir(self.backup_dir):
            return []
        names = sorted(
            name for name in os.listdir(self.backup_dir)
            if name.startswith("backup-") and name.endswith(self.EXTENSION)
        )
        return [os.path.join(self.backup_dir, name) for name in names]
