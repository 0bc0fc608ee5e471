import logging
import os
import re
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from ..contracts.artifact import BuildArtifact, ProjectKind
from ..errors import InitError
from ..toolchains.base import Toolchain
from .templates import DEFAULT_TEMPLATE, TEMPLATES, placeholders, render

logger = logging.getLogger(__name__)

PROJECT_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")


@dataclass
class InitOptions:
    project_name: Optional[str] = None   # defaults to the target directory name
    template: str = DEFAULT_TEMPLATE
    force: bool = False
    git: bool = True


class ProjectDriver:
    """init + build for one project kind; deployment is shared and lives elsewhere."""

    kind: ProjectKind
    toolchain_cls: type = Toolchain
    next_steps: List[str] = []

    def __init__(self, toolchain: Optional[Toolchain] = None):
        self.toolchain = toolchain or self.toolchain_cls()

    def list_templates(self) -> List[str]:
        return sorted(TEMPLATES[self.kind])

    def init(self, target_dir: str, options: Optional[InitOptions] = None) -> List[str]:
        """Scaffold a project into ``target_dir`` and return the files written."""
        options = options or InitOptions()
        target_dir = os.path.abspath(target_dir)
        name = options.project_name or os.path.basename(target_dir)
        if not PROJECT_NAME_RE.match(name):
            raise InitError(f"Invalid project name {name!r}: use letters, digits, '-' and '_'")

        files = TEMPLATES[self.kind].get(options.template)
        if files is None:
            raise InitError(
                f"Template '{options.template}' not found for {self.kind.value}. "
                f"Available: {', '.join(self.list_templates())}"
            )

        if os.path.isdir(target_dir) and os.listdir(target_dir) and not options.force:
            raise InitError(f"{target_dir} is not empty; use --force to scaffold into it anyway")

        values = placeholders(name)
        written = []
        try:
            for rel_path, content in files.items():
                dest = os.path.join(target_dir, render(rel_path, values))
                os.makedirs(os.path.dirname(dest), exist_ok=True)
                with open(dest, "w", encoding="utf-8") as f:
                    f.write(render(content, values))
                written.append(dest)
        except OSError as e:
            raise InitError(f"Failed to write template files into {target_dir}: {e}") from e

        logger.info("Scaffolded %s project %s into %s", self.kind.value, name, target_dir)
        if options.git:
            self._init_git(target_dir)
        return written

    def _init_git(self, target_dir: str):
        if os.path.exists(os.path.join(target_dir, ".git")):
            return
        try:
            result = subprocess.run(["git", "init"], cwd=target_dir, capture_output=True, text=True)
        except OSError as e:
            # A project without a repository is still usable
            logger.warning("git init skipped: %s", e)
            return
        if result.returncode != 0:
            logger.warning("git init failed: %s", result.stderr.strip())

    def build(self, target_dir: str, release: bool = True) -> BuildArtifact:
        return self.toolchain.build(target_dir, release=release)
