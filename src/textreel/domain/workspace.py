from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import uuid


@dataclass(frozen=True)
class Workspace:
    root: Path
    run_id: str

    @classmethod
    def create(cls, workdir: str, run_id: str | None = None) -> "Workspace":
        rid = run_id or uuid.uuid4().hex[:12]
        root = Path(workdir).expanduser().resolve() / rid
        root.mkdir(parents=True, exist_ok=True)
        (root / "tmp").mkdir(exist_ok=True)
        return cls(root=root, run_id=rid)

    def path(self, name: str) -> Path:
        p = self.root / name
        p.parent.mkdir(parents=True, exist_ok=True)
        return p

    @property
    def tmp_dir(self) -> Path:
        return self.root / "tmp"

    @property
    def source_mp4(self) -> Path:
        return self.path("source.mp4")

    @property
    def output_mp4(self) -> Path:
        return self.path("final.mp4")

    @property
    def preview_png(self) -> Path:
        return self.path("preview.png")

    @property
    def frame_png(self) -> Path:
        return self.path("tmp/frame.png")

    @property
    def ffmpeg_stderr(self) -> Path:
        return self.path("ffmpeg.stderr.txt")

    @property
    def run_manifest(self) -> Path:
        return self.path("run.json")

    def line_file(self, index: int) -> Path:
        return self.path(f"tmp/line_{index:02d}.txt")
