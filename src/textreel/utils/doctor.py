from __future__ import annotations

import importlib
import subprocess
import sys
import tempfile
from pathlib import Path

from textreel.config.settings import Settings


def _run_cmd(cmd: list[str]) -> tuple[int, str]:
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError:
        return 1, ""
    return proc.returncode, proc.stdout.strip() or proc.stderr.strip()


def _module_available(name: str) -> bool:
    try:
        importlib.import_module(name)
    except ImportError:
        return False
    return True


def _check_writable(path: Path) -> bool:
    try:
        path.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(dir=path, delete=True):
            return True
    except OSError:
        return False


def _get_version() -> str:
    import importlib.metadata

    try:
        return importlib.metadata.version("textreel")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def _ffmpeg_hint() -> str:
    if sys.platform.startswith("darwin"):
        return "Install with: brew install ffmpeg"
    if sys.platform.startswith("win"):
        return "Install with: winget install ffmpeg"
    return "Install with your package manager, e.g. apt install ffmpeg"


def _status_line(ok: bool, label: str, detail: str = "") -> str:
    icon = "✅" if ok else "❌"
    return f"{icon} {label}{detail}"


def _warn_line(label: str, detail: str = "") -> str:
    return f"⚠️ {label}{detail}"


def _check_binary(name: str, lines: list[str]) -> bool:
    code, out = _run_cmd([name, "-version"])
    if code != 0:
        lines.append(_status_line(False, name, " (not found)"))
        return False
    first_line = out.splitlines()[0] if out else "available"
    lines.append(_status_line(True, name, f": {first_line}"))
    return True


def run_doctor(settings: Settings) -> int:
    required_ok = True
    lines: list[str] = ["TextReel Doctor", ""]

    python_version = sys.version.split()[0]
    lines.append(_status_line(True, "Python", f": {python_version}"))
    lines.append(_status_line(True, "TextReel version", f": {_get_version()}"))

    for label, raw in (("Workdir writable", settings.workdir), ("Output dir writable", settings.output_dir)):
        path = Path(raw).expanduser().resolve()
        writable = _check_writable(path)
        required_ok = required_ok and writable
        lines.append(_status_line(writable, label, f": {path}"))

    ffmpeg_ok = _check_binary("ffmpeg", lines)
    ffprobe_ok = _check_binary("ffprobe", lines)
    if not (ffmpeg_ok and ffprobe_ok):
        required_ok = False
        lines.append(_ffmpeg_hint())

    for module, label in (("PIL", "Pillow"), ("httpx", "httpx")):
        available = _module_available(module)
        required_ok = required_ok and available
        lines.append(_status_line(available, label, " (available)" if available else " (not installed)"))

    if settings.font_path:
        font = Path(settings.font_path).expanduser()
        exists = font.is_file()
        required_ok = required_ok and exists
        lines.append(_status_line(exists, "Font file", f": {font}"))
    else:
        lines.append(_warn_line("Font file", ": not set (estimated metrics; preview uses Pillow's default font)"))

    lines.append(_status_line(True, "Style", f": {settings.style}"))

    print("\n".join(lines))
    return 0 if required_ok else 1
