from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, model_validator


class TargetKind(str, Enum):
    """Kinds of cargo targets we know how to build."""
    LIB = "lib"
    BIN = "bin"
    EXAMPLE = "example"
    BENCH = "bench"
    TEST = "test"


class Target(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: TargetKind
    name: str
    src_path: Optional[Path] = None


class Package(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    manifest_path: Optional[Path] = None
    targets: List[Target] = []

    @model_validator(mode="after")
    def _check_unique_targets(self) -> "Package":
        seen = set()
        for target in self.targets:
            key = (target.kind, target.name)
            if key in seen:
                raise ValueError(
                    f"duplicate {target.kind.value} target `{target.name}` in package `{self.name}`"
                )
            seen.add(key)
        return self


class Project(BaseModel):
    """Read-only view of a cargo workspace."""
    model_config = ConfigDict(frozen=True)

    packages: List[Package]
    default_package_name: str

    @model_validator(mode="after")
    def _check_default_package(self) -> "Project":
        if not any(p.name == self.default_package_name for p in self.packages):
            raise ValueError(f"default package `{self.default_package_name}` is not part of the project")
        return self

    def default_package(self) -> Package:
        return next(p for p in self.packages if p.name == self.default_package_name)

    def find_package(self, name: str) -> Optional[Package]:
        return next((p for p in self.packages if p.name == name), None)
