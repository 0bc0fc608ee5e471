import logging
import os
import shutil
import subprocess
import time
from typing import List, Optional

from ..contracts.artifact import BuildArtifact, BuildMetadata, ProjectKind
from ..errors import BuildError, BuildErrorKind

logger = logging.getLogger(__name__)


def run_tool(cmd: List[str], cwd: Optional[str] = None) -> subprocess.CompletedProcess:
    logger.info("  > %s", " ".join(cmd))
    try:
        return subprocess.run(cmd, capture_output=True, text=True, cwd=cwd)
    except FileNotFoundError as e:
        raise BuildError(BuildErrorKind.TOOLCHAIN_MISSING, f"{cmd[0]} not found on PATH") from e


def collect_warnings(output: str) -> List[str]:
    return [line for line in output.splitlines() if "warning:" in line.lower()]


class Toolchain:
    """Wraps one native compiler. ``build`` is the only entry point callers use.

    Subclasses describe the project layout (``validate_project``), the
    compiler invocation (``command``) and where the single output file lands
    (``output_path``); the sequencing and error mapping live here.
    """

    kind: ProjectKind
    tools: List[str] = []
    target: str = "wasm32-unknown-unknown"
    hex_output = False

    def validate_project(self, project_path: str): raise NotImplementedError
    def command(self, project_path: str, release: bool) -> List[str]: raise NotImplementedError
    def output_path(self, project_path: str, release: bool) -> str: raise NotImplementedError

    def version_command(self) -> List[str]:
        return [self.tools[0], "--version"]

    def prepare(self, project_path: str):
        """Hook run after tools are located and before compiling."""

    def require_tools(self):
        for tool in self.tools:
            if shutil.which(tool) is None:
                raise BuildError(
                    BuildErrorKind.TOOLCHAIN_MISSING,
                    f"{tool} is required to build {self.kind.value} projects but was not found on PATH",
                )

    def compiler_version(self) -> str:
        try:
            p = subprocess.run(self.version_command(), capture_output=True, text=True)
        except OSError:
            return "unknown"
        lines = [l.strip() for l in p.stdout.splitlines() if l.strip()]
        return lines[-1] if lines else "unknown"

    def build(self, project_path: str, release: bool = True) -> BuildArtifact:
        project_path = os.path.abspath(project_path)
        if not os.path.isdir(project_path):
            raise BuildError(BuildErrorKind.INVALID_PROJECT, f"Not a directory: {project_path}")

        self.validate_project(project_path)
        self.require_tools()

        start = time.monotonic()
        self.prepare(project_path)
        result = run_tool(self.command(project_path, release), cwd=project_path)
        if result.returncode != 0:
            raise BuildError(
                BuildErrorKind.COMPILE_FAILED,
                f"{self.tools[0]} exited with status {result.returncode}",
                diagnostics=result.stderr or result.stdout,
            )

        out = self.output_path(project_path, release)
        if not os.path.isfile(out):
            raise BuildError(
                BuildErrorKind.ARTIFACT_NOT_FOUND,
                f"Build finished but {out} was not produced",
                diagnostics=result.stderr,
            )

        return BuildArtifact(
            path=out,
            project_path=project_path,
            kind=self.kind,
            size=os.path.getsize(out),
            hex_encoded=self.hex_output,
            warnings=collect_warnings(result.stderr),
            metadata=BuildMetadata(
                build_time=time.monotonic() - start,
                compiler_version=self.compiler_version(),
                target=self.target,
                optimization_level="release" if release else "debug",
            ),
        )


def require_file(project_path: str, *candidates: str) -> str:
    """Return the first existing candidate path or fail with INVALID_PROJECT."""
    for rel in candidates:
        path = os.path.join(project_path, rel)
        if os.path.isfile(path):
            return path
    raise BuildError(
        BuildErrorKind.INVALID_PROJECT,
        f"{' or '.join(candidates)} not found in {project_path}",
    )
