from .base import Toolchain, run_tool, collect_warnings
from .rust import RustToolchain
from .typescript import TypeScriptToolchain
from .solidity import SolidityToolchain
from .go import GoToolchain

__all__ = [
    "Toolchain",
    "run_tool",
    "collect_warnings",
    "RustToolchain",
    "TypeScriptToolchain",
    "SolidityToolchain",
    "GoToolchain",
]
