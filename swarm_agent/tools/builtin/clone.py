"""Self-cloning capability - copy this agent into another directory."""

import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Any

from swarm_agent.core.logging import get_logger
from swarm_agent.tools.base import Capability, CapabilityDefinition, ToolIOError

if TYPE_CHECKING:
    from swarm_agent.core.config import Settings

logger = get_logger("tools.builtin.clone")


class CloneAgentCapability(Capability):
    """Capability that copies the executable, the Tool Store and the config file.

    Steps run in order and stop at the first failure. Nothing is rolled
    back: a failed clone can leave a partial copy in the target directory.
    """

    def __init__(self, settings: "Settings"):
        self._settings = settings

    @property
    def definition(self) -> CapabilityDefinition:
        return CapabilityDefinition(
            name="clone_agent",
            description="Copy this agent (executable, tools, config) to a directory",
            input_schema={
                "type": "object",
                "properties": {
                    "target_dir": {"type": "string", "minLength": 1, "description": "Destination"},
                },
                "required": ["target_dir"],
                "additionalProperties": False,
            },
            timeout_seconds=120,
        )

    def _copy_executable(self, target: Path) -> Path:
        exe = self._settings.effective_executable
        destination = target / exe.name
        try:
            shutil.copy2(exe, destination)
            destination.chmod(0o755)
        except OSError as e:
            raise ToolIOError(f"Error copying executable {exe}: {e}", tool_name="clone_agent")
        return destination

    def _copy_tools(self, target: Path) -> Path | None:
        tools_src = self._settings.tools_dir
        if not tools_src.exists():
            return None
        destination = target / tools_src.resolve().name
        try:
            shutil.copytree(tools_src, destination, dirs_exist_ok=True)
        except (OSError, shutil.Error) as e:
            raise ToolIOError(f"Error copying tools: {e}", tool_name="clone_agent")
        return destination

    def _copy_config(self, target: Path) -> Path | None:
        config_src = self._settings.config_file
        if not config_src.is_file():
            return None
        destination = target / config_src.name
        try:
            shutil.copy2(config_src, destination)
        except OSError as e:
            raise ToolIOError(f"Error copying config file: {e}", tool_name="clone_agent")
        return destination

    def execute(self, **kwargs: Any) -> None:
        """Clone the agent.

        Raises:
            ToolIOError: If any copy step fails
        """
        target = Path(kwargs["target_dir"]).expanduser()
        logger.info(f"Cloning agent to: {target}")

        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ToolIOError(f"Error creating directory {target}: {e}", tool_name="clone_agent")

        copied = [self._copy_executable(target), self._copy_tools(target), self._copy_config(target)]
        logger.info(
            f"Agent cloned to {target}: "
            + ", ".join(p.name for p in copied if p is not None)
        )
