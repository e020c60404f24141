import os
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence


@contextmanager
def working_directory(path: Path) -> Iterator[Path]:
    """Change the process working directory, restoring it on exit."""
    previous = Path.cwd()
    os.chdir(path)
    try:
        yield path
    finally:
        os.chdir(previous)


def find_command(names: Sequence[str]) -> Optional[str]:
    """Return the first of `names` that resolves on PATH."""
    for name in names:
        if shutil.which(name):
            return name
    return None
