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
Execution of platform tool commands, either captured or passed through
to the terminal.
"""
import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)

@dataclass
class CommandResult:
    """
    Outcome of a finished command.
    """
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

class ProcessRunner:
    """
    Runs external commands to completion. Every call blocks until the tool
    returns; no timeout is imposed beyond what the tool itself enforces.
    """
    def __init__(self, working_dir: Optional[str] = None):
        """
        Initializes the process runner.

        Args:
            working_dir (Optional[str]): Directory to run commands in.
        """
        self.working_dir = working_dir

    def which(self, tool: str) -> Optional[str]:
        """
        Locates an executable on PATH.

        Returns:
            Optional[str]: Full path of the executable, or None.
        """
        return shutil.which(tool)

    def run(self, command: List[str], capture: bool = True) -> CommandResult:
        """
        Runs a command and waits for it.

        Args:
            command (List[str]): Command and arguments to execute.
            capture (bool): Capture stdout/stderr instead of inheriting the terminal.

        Returns:
            CommandResult: Exit code and captured output.
        """
        logger.debug("Running: %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                cwd=self.working_dir,
                capture_output=capture,
                text=True,
                # Avoid shell=True for security reasons (CWE-78)
                shell=False,
            )
        except FileNotFoundError as e:
            logger.debug("Command not found: %s", e)
            return CommandResult(returncode=127, stderr=str(e))
        except OSError as e:
            logger.debug("Command could not be executed: %s", e)
            return CommandResult(returncode=126, stderr=str(e))

        if capture and result.returncode != 0:
            logger.debug("Command exited with %s: %s", result.returncode, (result.stderr or "").strip()[:500])
        return CommandResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )

    def stream(self, command: List[str]) -> int:
        """
        Runs a command with its output attached to the terminal, until it
        exits or the user interrupts it.

        Returns:
            int: Exit code of the command.
        """
        return self.run(command, capture=False).returncode
