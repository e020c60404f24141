'''
Post-processing of wasm32-unknown-unknown binaries.
'''
import json
from pathlib import Path
from typing import List, Protocol, Sequence

from ..utils.logging import setup_logger

logger = setup_logger()

LOADER_TEMPLATE = """\
"use strict";
const fs = require("fs");
const path = require("path");

const bytes = fs.readFileSync(path.join(__dirname, {wasm_name}));
const imports = new Proxy({{}}, {{
    get: (target, module) => new Proxy({{}}, {{
        get: (target, name) => () => {{
            throw new Error("unresolved import " + String(module) + "." + String(name));
        }}
    }})
}});

WebAssembly.instantiate(bytes, imports).then(({{ instance }}) => {{
    if (typeof instance.exports.main === "function") {{
        instance.exports.main(0, 0);
    }}
}}).catch((error) => {{
    console.error(error);
    process.exit(101);
}});
"""


class ArtifactPostProcessor(Protocol):
    def __call__(self, path: Path) -> Sequence[Path]:
        """Derive extra artifacts from a compiled binary."""


class NodeLoaderWriter:
    """Writes a `<name>.js` loader next to a `.wasm` so it can run under node."""

    def __call__(self, path: Path) -> List[Path]:
        if path.suffix != ".wasm":
            return []

        loader_path = path.with_suffix(".js")
        loader_path.write_text(LOADER_TEMPLATE.format(wasm_name=json.dumps(path.name)))
        logger.debug(f"Wrote loader {loader_path}")
        return [loader_path]
