import os
import re
from typing import List

from ..contracts.artifact import ProjectKind
from ..errors import BuildError, BuildErrorKind
from .base import Toolchain, require_file, run_tool

WASM_TARGET = "wasm32-unknown-unknown"


def read_crate_name(cargo_toml: str) -> str:
    """Library name from Cargo.toml: ``[lib] name`` if set, else ``[package] name``."""
    with open(cargo_toml) as f:
        content = f.read()
    for section in ("lib", "package"):
        body = re.search(rf"^\[{section}\]\s*$(.*?)(?=^\[|\Z)", content, re.DOTALL | re.MULTILINE)
        if not body:
            continue
        name = re.search(r'^name\s*=\s*"([^"]+)"', body.group(1), re.MULTILINE)
        if name:
            return name.group(1)
    raise BuildError(BuildErrorKind.INVALID_PROJECT, f"Could not find package name in {cargo_toml}")


class RustToolchain(Toolchain):
    kind = ProjectKind.RUST
    tools = ["cargo", "rustup"]
    target = WASM_TARGET

    def validate_project(self, project_path: str):
        require_file(project_path, "Cargo.toml")
        require_file(project_path, "lib.rs", os.path.join("src", "lib.rs"))

    def version_command(self) -> List[str]:
        return ["rustc", "--version"]

    def prepare(self, project_path: str):
        installed = run_tool(["rustup", "target", "list", "--installed"])
        if WASM_TARGET in installed.stdout:
            return
        added = run_tool(["rustup", "target", "add", WASM_TARGET])
        if added.returncode != 0:
            raise BuildError(
                BuildErrorKind.TOOLCHAIN_MISSING,
                f"Failed to install {WASM_TARGET} target",
                diagnostics=added.stderr,
            )

    def command(self, project_path: str, release: bool) -> List[str]:
        cmd = ["cargo", "build", "--target", WASM_TARGET]
        if release:
            cmd.append("--release")
        return cmd

    def output_path(self, project_path: str, release: bool) -> str:
        # Hyphens in crate names become underscores in the output file
        crate = read_crate_name(os.path.join(project_path, "Cargo.toml")).replace("-", "_")
        mode = "release" if release else "debug"
        return os.path.join(project_path, "target", WASM_TARGET, mode, f"{crate}.wasm")
