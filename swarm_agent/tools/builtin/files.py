"""File capabilities - read and write text files."""

from typing import TYPE_CHECKING, Any

from swarm_agent.tools.base import Capability, CapabilityDefinition, ToolIOError

if TYPE_CHECKING:
    from swarm_agent.tools.executor import CapabilityExecutor


class ReadFileCapability(Capability):
    """Capability that reads a UTF-8 text file.

    Constraints:
    - Paths are confined to the workspace when one is configured
    - File size is limited
    - Non-UTF-8 content is rejected
    """

    MAX_FILE_SIZE = 1024 * 1024  # 1 MB

    def __init__(self, executor: "CapabilityExecutor"):
        """Initialize with executor for path validation.

        Args:
            executor: Capability executor instance for path validation
        """
        self._executor = executor

    @property
    def definition(self) -> CapabilityDefinition:
        return CapabilityDefinition(
            name="read_file",
            description="Read the contents of a text file",
            input_schema={
                "type": "object",
                "properties": {
                    "path": {"type": "string", "minLength": 1, "description": "Path to the file"},
                },
                "required": ["path"],
                "additionalProperties": False,
            },
            timeout_seconds=10,
        )

    def execute(self, **kwargs: Any) -> str:
        """Read file contents.

        Args:
            path: Path to the file

        Returns:
            File contents

        Raises:
            ToolIOError: On any filesystem failure
        """
        path_str = kwargs["path"]
        path = self._executor.validate_path(path_str)

        try:
            file_size = path.stat().st_size
        except FileNotFoundError:
            raise ToolIOError(f"File does not exist: {path_str}", tool_name="read_file")
        except OSError as e:
            raise ToolIOError(f"Cannot access file: {e}", tool_name="read_file")

        if not path.is_file():
            raise ToolIOError(f"Path is not a file: {path_str}", tool_name="read_file")

        if file_size > self.MAX_FILE_SIZE:
            raise ToolIOError(
                f"File too large: {file_size} bytes (max: {self.MAX_FILE_SIZE})",
                tool_name="read_file",
            )

        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            raise ToolIOError(f"File is not valid UTF-8 text: {path_str}", tool_name="read_file")
        except OSError as e:
            raise ToolIOError(f"Cannot read {path_str}: {e}", tool_name="read_file")


class WriteFileCapability(Capability):
    """Capability that writes a UTF-8 text file, replacing its contents.

    Parent directories are not created.
    """

    def __init__(self, executor: "CapabilityExecutor"):
        self._executor = executor

    @property
    def definition(self) -> CapabilityDefinition:
        return CapabilityDefinition(
            name="write_file",
            description="Write text to a file, replacing existing contents",
            input_schema={
                "type": "object",
                "properties": {
                    "path": {"type": "string", "minLength": 1, "description": "Path to the file"},
                    "content": {"type": "string", "description": "Text to write"},
                },
                "required": ["path", "content"],
                "additionalProperties": False,
            },
            timeout_seconds=10,
        )

    def execute(self, **kwargs: Any) -> None:
        """Write file contents.

        Raises:
            ToolIOError: On any filesystem failure
        """
        path_str = kwargs["path"]
        path = self._executor.validate_path(path_str)

        if path.is_dir():
            raise ToolIOError(f"Path is a directory: {path_str}", tool_name="write_file")

        try:
            path.write_text(kwargs["content"], encoding="utf-8")
        except OSError as e:
            raise ToolIOError(f"Cannot write {path_str}: {e}", tool_name="write_file")
