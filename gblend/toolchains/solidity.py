import glob
import os
from typing import List

from ..contracts.artifact import ProjectKind
from ..errors import BuildError, BuildErrorKind
from .base import Toolchain

CONTRACTS_DIR = "contracts"


class SolidityToolchain(Toolchain):
    """solc producing EVM bytecode as ``build/<Contract>.bin`` (hex text)."""

    kind = ProjectKind.SOLIDITY
    tools = ["solc"]
    target = "evm"
    hex_output = True

    def main_source(self, project_path: str) -> str:
        """The contract to compile: the one named after the project, or the only one."""
        sources = sorted(glob.glob(os.path.join(project_path, CONTRACTS_DIR, "*.sol")))
        if not sources:
            raise BuildError(
                BuildErrorKind.INVALID_PROJECT,
                f"No .sol files found in {os.path.join(project_path, CONTRACTS_DIR)}",
            )
        if len(sources) == 1:
            return sources[0]
        wanted = os.path.basename(project_path).replace("-", "").lower()
        for src in sources:
            if os.path.splitext(os.path.basename(src))[0].lower() == wanted:
                return src
        raise BuildError(
            BuildErrorKind.INVALID_PROJECT,
            f"Several contracts in {CONTRACTS_DIR}/ and none named after the project: "
            + ", ".join(os.path.basename(s) for s in sources),
        )

    def validate_project(self, project_path: str):
        self.main_source(project_path)

    def contract_name(self, project_path: str) -> str:
        return os.path.splitext(os.path.basename(self.main_source(project_path)))[0]

    def command(self, project_path: str, release: bool) -> List[str]:
        cmd = ["solc", "--bin", "--overwrite", "-o", "build"]
        if release:
            cmd.append("--optimize")
        cmd.append(os.path.relpath(self.main_source(project_path), project_path))
        return cmd

    def output_path(self, project_path: str, release: bool) -> str:
        return os.path.join(project_path, "build", f"{self.contract_name(project_path)}.bin")
