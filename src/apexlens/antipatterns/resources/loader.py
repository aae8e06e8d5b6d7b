"""Fix-instruction loader."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import yaml

from apexlens.antipatterns.domain.enums import AntipatternType
from apexlens.shared.domain.exceptions import ConfigurationError
from apexlens.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

DEFAULT_INSTRUCTIONS_PATH = Path(__file__).parent / "fix_instructions.yaml"


@dataclass(frozen=True)
class FixInstruction:
    """A versioned fix instruction for one antipattern type."""

    antipattern_type: str
    version: str
    instruction: str


class FixInstructionLoader:
    """Loads fix instructions from YAML once and serves them verbatim."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path or DEFAULT_INSTRUCTIONS_PATH
        self._instructions: Optional[Dict[str, FixInstruction]] = None

    def load(self) -> Dict[str, FixInstruction]:
        """
        Read the instruction file (first call only).

        Raises:
            ConfigurationError: If the file is missing or malformed
        """
        if self._instructions is not None:
            return self._instructions

        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Cannot load fix instructions from {self.path}: {e}",
                {"path": str(self.path)},
            ) from e

        entries = data.get("instructions")
        if not isinstance(entries, dict):
            raise ConfigurationError(
                f"Fix instruction file {self.path} has no 'instructions' mapping",
                {"path": str(self.path)},
            )

        instructions: Dict[str, FixInstruction] = {}
        for key, entry in entries.items():
            if not isinstance(entry, dict) or "instruction" not in entry:
                raise ConfigurationError(
                    f"Fix instruction entry '{key}' has no 'instruction' text",
                    {"path": str(self.path), "antipattern_type": key},
                )
            instructions[key] = FixInstruction(
                antipattern_type=key,
                version=str(entry.get("version", "")),
                instruction=entry["instruction"],
            )

        logger.debug("fix_instructions_loaded", path=str(self.path), count=len(instructions))
        self._instructions = instructions
        return instructions

    def get(self, antipattern_type: AntipatternType) -> FixInstruction:
        """
        Fix instruction for a type.

        Raises:
            ConfigurationError: If the type has no entry
        """
        instructions = self.load()
        entry = instructions.get(antipattern_type.value)
        if entry is None:
            raise ConfigurationError(
                f"No fix instruction defined for antipattern type {antipattern_type.value}",
                {"antipattern_type": antipattern_type.value, "path": str(self.path)},
            )
        return entry


_default_loader: Optional[FixInstructionLoader] = None


def get_default_loader() -> FixInstructionLoader:
    """Process-wide loader for the packaged instruction file."""
    global _default_loader
    if _default_loader is None:
        _default_loader = FixInstructionLoader()
    return _default_loader
