'''
Parsing of cargo's `--message-format json` output.
'''
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

from ..project.resolver import target_kind
from ..utils.logging import setup_logger
from .build_config import BuildConfiguration, MessageFormat, Profile

logger = setup_logger()


def _normalize(name: str) -> str:
    return name.replace("-", "_")


def parse_message(line: str) -> Optional[Dict[str, Any]]:
    """Decode one line of cargo output, or None if it is not a JSON message."""
    line = line.strip()
    if not line.startswith("{"):
        return None
    try:
        message = json.loads(line)
    except json.JSONDecodeError:
        return None
    return message if isinstance(message, dict) else None


def artifact_paths(message: Dict[str, Any], config: BuildConfiguration) -> List[Path]:
    """Files of a `compiler-artifact` message that belong to the configured target."""
    if message.get("reason") != "compiler-artifact":
        return []

    target = message.get("target") or {}
    if _normalize(target.get("name", "")) != _normalize(config.target.name):
        return []
    # A lib and a bin may share a name.
    if target_kind(target.get("kind", [])) != config.target.kind:
        return []

    is_test = bool((message.get("profile") or {}).get("test"))
    if is_test != (config.profile == Profile.TEST):
        return []

    return [Path(filename) for filename in message.get("filenames", [])]


def echo_message(line: str, message: Optional[Dict[str, Any]], config: BuildConfiguration,
                 out: Optional[TextIO] = None, err: Optional[TextIO] = None) -> None:
    """Show a cargo output line the way the user asked for."""
    out = out or sys.stdout
    err = err or sys.stderr

    if message is None:
        if line.strip():
            out.write(line if line.endswith("\n") else line + "\n")
        return

    if message.get("reason") != "compiler-message":
        return

    if config.message_format == MessageFormat.JSON:
        out.write(line if line.endswith("\n") else line + "\n")
        return

    rendered = (message.get("message") or {}).get("rendered")
    if rendered:
        err.write(rendered)


def collect_artifacts(lines: List[str], config: BuildConfiguration,
                      out: Optional[TextIO] = None, err: Optional[TextIO] = None) -> List[Path]:
    """Echo diagnostics and return the artifacts produced for the target, in order."""
    artifacts: List[Path] = []
    for line in lines:
        message = parse_message(line)
        echo_message(line, message, config, out=out, err=err)
        if message is None:
            continue
        for path in artifact_paths(message, config):
            if path not in artifacts:
                artifacts.append(path)

    logger.debug(f"Collected {len(artifacts)} artifact(s) for {config.target.name}")
    return artifacts
