from .base import ProjectDriver, InitOptions
from .projects import DRIVERS, get_driver, RustDriver, TypeScriptDriver, SolidityDriver, GoDriver

__all__ = [
    "ProjectDriver",
    "InitOptions",
    "DRIVERS",
    "get_driver",
    "RustDriver",
    "TypeScriptDriver",
    "SolidityDriver",
    "GoDriver",
]
