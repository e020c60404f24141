# workflows/__init__.py
from .build_workflow import BuildWorkflow
from .test_workflow import TestArgs, TestOutcome, TestState, TestWorkflow

__all__ = ['BuildWorkflow', 'TestArgs', 'TestOutcome', 'TestState', 'TestWorkflow']
