"""File-backed Tool Store: the source of truth for tool source text."""

import json
import os
import tempfile
from pathlib import Path

from swarm_agent.core.logging import get_logger
from swarm_agent.tools.base import ToolIOError, ToolNotFoundError, ToolOrigin, ToolRecord

logger = get_logger("tools.store")

TOOL_SUFFIX = ".py"
ORIGINS_MANIFEST = ".origins.json"


def _atomic_write(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` through a temp file and ``os.replace``.

    Readers see either the previous file or the complete new one.
    """
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def _to_record(name: str, source: str, meta: dict[str, str] | None) -> ToolRecord:
    if not meta:
        return ToolRecord(name=name, source=source)
    return ToolRecord(
        name=name,
        source=source,
        origin=ToolOrigin(meta.get("origin", ToolOrigin.REMOTE.value)),
        sender_id=meta.get("sender_id") or None,
    )


class ToolStore:
    """Directory of ``<name>.py`` files, one per tool.

    Remote tools additionally get an entry in a hidden origins manifest so
    their provenance survives restarts. The store keeps no cache: every read
    goes to disk, so it can never diverge from what a rebuild would load.
    """

    def __init__(self, tools_dir: str | Path):
        """Initialize the store, creating the directory if needed.

        Args:
            tools_dir: Directory holding the tool files

        Raises:
            ToolIOError: If the directory cannot be created
        """
        self.tools_dir = Path(tools_dir)
        try:
            self.tools_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ToolIOError(f"Cannot create tool store at {self.tools_dir}: {e}") from e

    def path_for(self, name: str) -> Path:
        """Get the file path for a tool name.

        Raises:
            ToolNotFoundError: If ``name`` cannot name a tool file
        """
        if not name.isidentifier():
            raise ToolNotFoundError(f"Tool '{name}' not found")
        return self.tools_dir / f"{name}{TOOL_SUFFIX}"

    @property
    def manifest_path(self) -> Path:
        """Path of the origins manifest."""
        return self.tools_dir / ORIGINS_MANIFEST

    def _read_manifest(self) -> dict[str, dict[str, str]]:
        try:
            raw = self.manifest_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise ToolIOError(f"Cannot read origins manifest: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring corrupt origins manifest at {self.manifest_path}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_manifest(self, manifest: dict[str, dict[str, str]]) -> None:
        payload = json.dumps(manifest, indent=2, sort_keys=True).encode("utf-8")
        try:
            _atomic_write(self.manifest_path, payload)
        except OSError as e:
            raise ToolIOError(f"Cannot write origins manifest: {e}") from e

    def names(self) -> list[str]:
        """List stored tool names, sorted.

        Raises:
            ToolIOError: If the directory cannot be listed
        """
        try:
            return sorted(
                p.stem
                for p in self.tools_dir.iterdir()
                if p.suffix == TOOL_SUFFIX and p.is_file() and not p.name.startswith(".")
            )
        except OSError as e:
            raise ToolIOError(f"Cannot list tool store: {e}") from e

    def exists(self, name: str) -> bool:
        """Check if a tool file exists."""
        return name.isidentifier() and self.path_for(name).is_file()

    def _read_source(self, name: str) -> str:
        try:
            return self.path_for(name).read_bytes().decode("utf-8")
        except FileNotFoundError as e:
            raise ToolNotFoundError(f"Tool '{name}' not found") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ToolIOError(f"Cannot read tool file: {e}", tool_name=name) from e

    def get(self, name: str) -> ToolRecord:
        """Load one tool.

        Raises:
            ToolNotFoundError: If no file exists for ``name``
            ToolIOError: If the file cannot be read
        """
        source = self._read_source(name)
        return _to_record(name, source, self._read_manifest().get(name))

    def load_all(self) -> list[ToolRecord]:
        """Load every stored tool, sorted by name.

        A file removed between listing and reading is skipped.
        """
        manifest = self._read_manifest()
        records = []
        for name in self.names():
            try:
                source = self._read_source(name)
            except ToolNotFoundError:
                continue
            records.append(_to_record(name, source, manifest.get(name)))
        return records

    def save(
        self,
        name: str,
        source: str,
        origin: ToolOrigin = ToolOrigin.LOCAL,
        sender_id: str | None = None,
    ) -> ToolRecord:
        """Write a tool durably, replacing any previous version.

        The previous source is not kept anywhere once the save succeeds. If
        the origins manifest cannot be updated the previous file is put back.

        Raises:
            ToolIOError: If the write fails
        """
        path = self.path_for(name)
        try:
            data = source.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ToolIOError(f"Source is not valid UTF-8 text: {e.reason}", tool_name=name) from e

        try:
            previous = path.read_bytes()
        except FileNotFoundError:
            previous = None
        except OSError as e:
            raise ToolIOError(f"Cannot read tool file: {e}", tool_name=name) from e

        try:
            _atomic_write(path, data)
        except OSError as e:
            raise ToolIOError(f"Cannot write tool file: {e}", tool_name=name) from e

        try:
            manifest = self._read_manifest()
            if origin == ToolOrigin.REMOTE:
                manifest[name] = {"origin": origin.value, "sender_id": sender_id or ""}
                self._write_manifest(manifest)
            elif name in manifest:
                del manifest[name]
                self._write_manifest(manifest)
        except ToolIOError:
            self._restore(path, previous)
            raise

        overwrite = previous is not None

        logger.info(f"{'Overwrote' if overwrite else 'Saved'} tool {name} ({origin.value})")
        return ToolRecord(name=name, source=source, origin=origin, sender_id=sender_id)

    def _restore(self, path: Path, previous: bytes | None) -> None:
        """Put back the file contents from before a failed save."""
        try:
            if previous is None:
                path.unlink(missing_ok=True)
            else:
                _atomic_write(path, previous)
        except OSError as e:
            logger.error(f"Could not restore {path.name} after a failed save: {e}")
            return
        logger.warning(f"Restored {path.name} after a failed save")

    def delete(self, name: str) -> None:
        """Delete a tool file.

        Raises:
            ToolNotFoundError: If no file exists for ``name``
            ToolIOError: If the file cannot be removed
        """
        try:
            self.path_for(name).unlink()
        except FileNotFoundError as e:
            raise ToolNotFoundError(f"Tool '{name}' not found") from e
        except OSError as e:
            raise ToolIOError(f"Cannot delete tool file: {e}", tool_name=name) from e

        manifest = self._read_manifest()
        if name in manifest:
            del manifest[name]
            self._write_manifest(manifest)

        logger.info(f"Deleted tool {name}")

    def __contains__(self, name: str) -> bool:
        return self.exists(name)

    def __len__(self) -> int:
        return len(self.names())
