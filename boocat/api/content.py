"""
Website content: templates bound to formats, and static files.

Files under the web root ending in .tmpl are Jinja2 templates. The URL path
of a template is its path without the extension, and its format is the one
named like the file stem, so list/author.tmpl serves /list/author with the
author format. .htm and .html files are served without their extension;
other files are served as they are named.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from fastapi.templating import Jinja2Templates

from util.logging import logger

from ..core.formats import Format, FormatRegistry

TEMPLATE_EXT = ".tmpl"
HTML_EXTS = (".htm", ".html")
INDEX_PATH = "/index"


@dataclass(frozen=True)
class Template:
    name: str
    format: Format


@dataclass(frozen=True)
class StaticFile:
    path: Path
    media_type: Optional[str] = None


class WebContent:
    """Templates and static files of the website, by URL path."""

    def __init__(self, registry: FormatRegistry):
        self.registry = registry
        self.templates: Dict[str, Template] = {}
        self.static_files: Dict[str, StaticFile] = {}
        self.renderer: Optional[Jinja2Templates] = None
        self.root: Optional[Path] = None

    @classmethod
    def from_directory(cls, root, registry: FormatRegistry) -> "WebContent":
        content = cls(registry)
        content.load(root)
        return content

    def load(self, root) -> None:
        """Load all templates and static files under root."""
        root = Path(root)
        if not root.is_dir():
            raise FileNotFoundError(f"Web root not found: {root}")
        self.root = root
        self.renderer = Jinja2Templates(directory=str(root))

        for dirpath, _, filenames in os.walk(root):
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                relative = path.relative_to(root).as_posix()
                if path.suffix == TEMPLATE_EXT:
                    self._load_template(relative)
                else:
                    self._load_static_file(path, relative)

        logger.info(f"Loaded {len(self.templates)} templates and {len(self.static_files)} static files from {root}")

    def _load_template(self, relative: str) -> None:
        stem = Path(relative).stem
        fmt = self.registry.get(stem)
        if fmt is None:
            logger.warning(f"Template {relative} doesn't match any format, skipped")
            return
        # Fail at startup rather than at the first request
        self.renderer.get_template(relative)
        url_path = "/" + relative[:-len(TEMPLATE_EXT)]
        self.templates[url_path] = Template(name=relative, format=fmt)

    def _load_static_file(self, path: Path, relative: str) -> None:
        if path.suffix in HTML_EXTS:
            url_path = "/" + relative[:-len(path.suffix)]
            self.static_files[url_path] = StaticFile(path=path, media_type="text/html")
        else:
            self.static_files["/" + relative] = StaticFile(path=path)

    def template_for(self, url_path: str) -> Optional[Template]:
        return self.templates.get(url_path)

    def file_for(self, url_path: str) -> Optional[StaticFile]:
        if url_path == "/":
            url_path = INDEX_PATH
        return self.static_files.get(url_path)
