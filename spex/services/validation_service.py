"""
Project structure validation for spex.

A project keeps its own specifications under ``spex/``, grouped by type:

    spex/
      adr/0001-use-postgres.md
      instruction/coding-style.md

At least one known type directory must exist, and each one present must
hold at least one markdown file.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List
import logging

from ..config import SPECIFICATION_ROOT_NAME
from ..exit_codes import ValidationError

logger = logging.getLogger(__name__)

SUPPORTED_SPEX_TYPES = ("adr", "instruction", "dataformat", "feature")


@dataclass(frozen=True)
class ValidatedType:
    type: str
    path: str
    markdown_file_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'path': self.path,
            'markdown_file_count': self.markdown_file_count,
        }


@dataclass
class ValidationResult:
    spex_path: str
    validated_types: List[ValidatedType] = field(default_factory=list)

    @property
    def type_names(self) -> List[str]:
        return [validated.type for validated in self.validated_types]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'spex_path': self.spex_path,
            'validated_types': [validated.to_dict() for validated in self.validated_types],
        }


class ValidationService:
    """Checks the ``spex/`` layout of a project."""

    def __init__(self, supported_types=SUPPORTED_SPEX_TYPES):
        self.supported_types = tuple(supported_types)

    def validate(self, cwd: Path) -> ValidationResult:
        """
        Validate the project at ``cwd``.

        Raises:
            ValidationError: With one issue per violated rule
        """
        spex_path = Path(cwd) / SPECIFICATION_ROOT_NAME
        issues: List[str] = []
        validated: List[ValidatedType] = []

        if not spex_path.is_dir():
            raise ValidationError([f"Missing spex directory: {spex_path}"])

        present = [t for t in self.supported_types if (spex_path / t).is_dir()]
        if not present:
            issues.append(
                "Missing supported type directory in spex. Expected at least one of: "
                + ", ".join(self.supported_types) + "."
            )

        for spex_type in present:
            type_path = spex_path / spex_type
            entries = list(type_path.iterdir())
            markdown_count = sum(
                1 for entry in entries
                if entry.is_file() and entry.name.lower().endswith('.md')
            )
            logger.debug(f"spex/{spex_type}: {markdown_count} markdown file(s)")

            if not entries:
                issues.append(f"The spex/{spex_type} directory must not be empty.")
            if markdown_count == 0:
                issues.append(f"The spex/{spex_type} directory must contain at least one .md file.")

            validated.append(ValidatedType(
                type=spex_type,
                path=str(type_path),
                markdown_file_count=markdown_count,
            ))

        if issues:
            raise ValidationError(issues)

        return ValidationResult(spex_path=str(spex_path), validated_types=validated)
