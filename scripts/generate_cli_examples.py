from __future__ import annotations

import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

EXAMPLES_ROOT = Path("examples/cli-options")
BASE_ARGS = ["--mode", "image", "--width", "160", "--height", "120", "--zoom", "45"]

# view centres that frame each kind nicely at the base zoom
KIND_ARGS: dict[str, list[str]] = {
    "mandelbrot": ["--center", "-0.5", "0"],
    "julia": ["--center", "0", "0", "--parameter", "-0.4", "0.6"],
    "burning_ship": ["--center", "-0.45", "0.5"],
    "tricorn": ["--center", "-0.3", "0"],
    "multibrot": ["--center", "0", "0", "--exponent", "5.5"],
    "newton": ["--center", "0", "0"],
    "phoenix": ["--center", "0", "0"],
    "lambda": ["--center", "1", "0", "--zoom", "30"],
}


@dataclass
class Expected:
    path: Path
    is_dir: bool = False


@dataclass
class Example:
    name: str
    args: list[str]
    expected: list[Expected]

    def full_args(self) -> list[str]:
        return [sys.executable, "zoom.py", *self.args]


def _image_example(name: str, filename: str, *extra: str) -> Example:
    output = EXAMPLES_ROOT / name / filename
    return Example(name=name, args=[*BASE_ARGS, *extra, "--output", str(output)], expected=[Expected(output)])


EXAMPLES: list[Example] = [
    *(_image_example(f"kind-{kind}", f"{kind}.png", "--kind", kind, *args) for kind, args in KIND_ARGS.items()),
    _image_example("max-iterations", "deep.png", "--max-iterations", "400"),
    _image_example("escape-threshold", "tight.png", "--escape-threshold", "2"),
    _image_example("rotation", "rotated.png", "--rotation", "45"),
    _image_example("palette", "fire.png", "--palette", "fire"),
    _image_example("colormap", "inferno.png", "--palette", "inferno", "--anchors", "8"),
    _image_example("shift", "shifted.png", "--palette", "rainbow", "--shift", "0.35"),
    _image_example("export-scale", "export.png", "--export-scale", "2"),
    _image_example("scalar-backend", "reference.png", "--backend", "scalar", "--max-iterations", "32"),
    _image_example("format", "custom.webp", "--format", "webp"),
    Example(
        name="final-zoom",
        args=[
            "--mode",
            "gif",
            "--frames",
            "8",
            "--final-zoom",
            "50",
            "--width",
            "160",
            "--height",
            "120",
            "--output",
            str(EXAMPLES_ROOT / "final-zoom" / "zoom.gif"),
        ],
        expected=[Expected(EXAMPLES_ROOT / "final-zoom" / "zoom.gif")],
    ),
    Example(
        name="frames",
        args=[
            "--mode",
            "frames",
            "--frames",
            "4",
            "--zoom-factor",
            "1.5",
            "--width",
            "160",
            "--height",
            "120",
            "--frame-dir",
            str(EXAMPLES_ROOT / "frames" / "frames"),
        ],
        expected=[Expected(EXAMPLES_ROOT / "frames" / "frames", is_dir=True)],
    ),
    Example(
        name="save-settings",
        args=[
            *BASE_ARGS,
            "--kind",
            "julia",
            "--save-settings",
            str(EXAMPLES_ROOT / "save-settings" / "julia.yaml"),
            "--output",
            str(EXAMPLES_ROOT / "save-settings" / "julia.png"),
        ],
        expected=[
            Expected(EXAMPLES_ROOT / "save-settings" / "julia.yaml"),
            Expected(EXAMPLES_ROOT / "save-settings" / "julia.png"),
        ],
    ),
]


def _ensure_clean(paths: Iterable[Path]) -> None:
    for path in paths:
        if path.is_dir():
            shutil.rmtree(path)
        elif path.exists():
            path.unlink()


def _verify(example: Example) -> None:
    for expected in example.expected:
        if expected.is_dir:
            if not expected.path.is_dir() or not any(expected.path.iterdir()):
                raise RuntimeError(f"Expected directory {expected.path} is missing or empty")
        elif not expected.path.is_file():
            raise RuntimeError(f"Expected file {expected.path} was not created")


def main() -> None:
    EXAMPLES_ROOT.mkdir(parents=True, exist_ok=True)
    for example in EXAMPLES:
        print(f"\n[cli-example] {example.name}")
        _ensure_clean([EXAMPLES_ROOT / example.name])
        subprocess.run(example.full_args(), check=True)
        _verify(example)
    print("\nAll CLI examples generated successfully.")


if __name__ == "__main__":
    main()
