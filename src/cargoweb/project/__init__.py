# project/__init__.py
from .models import Package, Project, Target, TargetKind
from .resolver import (
    TargetSelector,
    kinds_filter,
    load_project,
    select_package,
    select_targets,
)

__all__ = [
    'Package',
    'Project',
    'Target',
    'TargetKind',
    'TargetSelector',
    'kinds_filter',
    'load_project',
    'select_package',
    'select_targets',
]
