"""HTML results report written after a successful run."""

from __future__ import annotations

from html import escape
from pathlib import Path

from .models import Package

TEMPLATES_DIR = Path(__file__).parent / "templates"


def _package_lines(packages: list[Package], base_url: str, tag: str) -> str:
    lines: list[str] = []
    for pkg in packages:
        href = escape(f"{base_url}/package/{pkg.name}")
        lines.append(
            '      <li class="package-item">\n'
            f'        <a href="{href}" target="_blank" class="package-link">\n'
            f'          <span class="package-name">{escape(pkg.name)}</span>\n'
            f'          <span class="package-version">@{escape(pkg.version)}</span>\n'
            "        </a>\n"
            f'        <span class="tag-badge">{escape(tag)}</span>\n'
            "      </li>"
        )
    return "\n".join(lines)


def render_report(
    packages: list[Package],
    *,
    title: str,
    tag: str,
    dry_run: bool,
    registry_url: str,
) -> str:
    """Fill the report template for the packages that were processed."""
    base_url = registry_url.rstrip("/")
    template = (TEMPLATES_DIR / "report.html").read_text()
    replacements = {
        "__TITLE__": escape(title),
        "__STATUS_CLASS__": "dry-run" if dry_run else "publish",
        "__STATUS_LABEL__": "Dry Run" if dry_run else "Published",
        "__REGISTRY__": escape(base_url),
        "__PACKAGES__": _package_lines(packages, base_url, tag),
    }
    for placeholder, value in replacements.items():
        template = template.replace(placeholder, value)
    return template


def write_report(path: Path, content: str) -> Path:
    """Write the report to ``path``, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path
