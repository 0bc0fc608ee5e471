import os
import re
from typing import List

from ..contracts.artifact import ProjectKind
from ..errors import BuildError, BuildErrorKind
from .base import Toolchain, require_file


def read_module_name(go_mod: str) -> str:
    with open(go_mod) as f:
        match = re.search(r"^module\s+(\S+)", f.read(), re.MULTILINE)
    if not match:
        raise BuildError(BuildErrorKind.INVALID_PROJECT, f"No module directive in {go_mod}")
    return match.group(1).rstrip("/").split("/")[-1]


class GoToolchain(Toolchain):
    """TinyGo targeting bare WebAssembly."""

    kind = ProjectKind.GO
    tools = ["tinygo"]
    target = "wasm-unknown"

    def version_command(self) -> List[str]:
        return ["tinygo", "version"]

    def validate_project(self, project_path: str):
        require_file(project_path, "go.mod")
        require_file(project_path, "main.go")

    def prepare(self, project_path: str):
        os.makedirs(os.path.join(project_path, "build"), exist_ok=True)

    def command(self, project_path: str, release: bool) -> List[str]:
        name = read_module_name(os.path.join(project_path, "go.mod"))
        cmd = ["tinygo", "build", "-o", os.path.join("build", f"{name}.wasm"), "-target", self.target]
        cmd += ["-opt", "z", "-no-debug"] if release else ["-opt", "1"]
        cmd.append(".")
        return cmd

    def output_path(self, project_path: str, release: bool) -> str:
        name = read_module_name(os.path.join(project_path, "go.mod"))
        return os.path.join(project_path, "build", f"{name}.wasm")
