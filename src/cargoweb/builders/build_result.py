from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class BuildResult:
    """Result of build step."""
    success: bool
    artifacts: List[Path] = field(default_factory=list)

    def find_artifact(self, suffix: str) -> Optional[Path]:
        """Return the first artifact with the given file extension."""
        return next((a for a in self.artifacts if a.suffix == suffix), None)
