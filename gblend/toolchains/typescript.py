import json
import os
from typing import List

from ..contracts.artifact import ProjectKind
from ..errors import BuildError, BuildErrorKind
from .base import Toolchain, require_file

ENTRY = os.path.join("assembly", "index.ts")


class TypeScriptToolchain(Toolchain):
    """AssemblyScript compiler (``asc``) run through npx."""

    kind = ProjectKind.TYPESCRIPT
    tools = ["npx"]
    target = "wasm32"

    def version_command(self) -> List[str]:
        return ["npx", "asc", "--version"]

    def validate_project(self, project_path: str):
        require_file(project_path, "package.json")
        require_file(project_path, ENTRY)

    def artifact_name(self, project_path: str) -> str:
        try:
            with open(os.path.join(project_path, "package.json")) as f:
                name = json.load(f).get("name")
        except (OSError, json.JSONDecodeError) as e:
            raise BuildError(BuildErrorKind.INVALID_PROJECT, f"Unreadable package.json: {e}") from e
        if not name:
            raise BuildError(BuildErrorKind.INVALID_PROJECT, "package.json has no \"name\"")
        # Scoped packages (@scope/name) keep only the last segment
        return name.split("/")[-1]

    def prepare(self, project_path: str):
        os.makedirs(os.path.join(project_path, "build"), exist_ok=True)

    def command(self, project_path: str, release: bool) -> List[str]:
        out = os.path.join("build", f"{self.artifact_name(project_path)}.wasm")
        return ["npx", "asc", ENTRY, "--outFile", out, "--optimize" if release else "--debug"]

    def output_path(self, project_path: str, release: bool) -> str:
        return os.path.join(project_path, "build", f"{self.artifact_name(project_path)}.wasm")
