from typing import Dict, Optional

from ..contracts.artifact import ProjectKind
from ..toolchains import GoToolchain, RustToolchain, SolidityToolchain, TypeScriptToolchain
from ..toolchains.base import Toolchain
from .base import ProjectDriver


class RustDriver(ProjectDriver):
    kind = ProjectKind.RUST
    toolchain_cls = RustToolchain
    next_steps = [
        "Review the generated code in lib.rs",
        "Run 'gblend build rust' to compile to WASM",
        "Run the tests with 'cargo test'",
    ]


class TypeScriptDriver(ProjectDriver):
    kind = ProjectKind.TYPESCRIPT
    toolchain_cls = TypeScriptToolchain
    next_steps = [
        "Run 'npm install' to fetch AssemblyScript",
        "Edit assembly/index.ts",
        "Run 'gblend build typescript' to compile to WASM",
    ]


class SolidityDriver(ProjectDriver):
    kind = ProjectKind.SOLIDITY
    toolchain_cls = SolidityToolchain
    next_steps = [
        "Edit the contract under contracts/",
        "Run 'gblend build solidity' to compile with solc",
    ]


class GoDriver(ProjectDriver):
    kind = ProjectKind.GO
    toolchain_cls = GoToolchain
    next_steps = [
        "Edit main.go",
        "Run 'gblend build go' to compile with TinyGo",
    ]


# One driver per kind; adding a kind means adding a class here
DRIVERS: Dict[ProjectKind, type] = {
    ProjectKind.RUST: RustDriver,
    ProjectKind.TYPESCRIPT: TypeScriptDriver,
    ProjectKind.SOLIDITY: SolidityDriver,
    ProjectKind.GO: GoDriver,
}


def get_driver(kind, toolchain: Optional[Toolchain] = None) -> ProjectDriver:
    kind = ProjectKind(kind)
    return DRIVERS[kind](toolchain)
