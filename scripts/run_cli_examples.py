from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass, field

BASE_ARGS = ["--no-show", "--width", "160", "--height", "120"]


@dataclass
class Example:
    name: str
    args: list[str]
    expect: list[str] = field(default_factory=list)

    def full_args(self) -> list[str]:
        return [sys.executable, "explore.py", *BASE_ARGS, *self.args]


EXAMPLES: list[Example] = [
    Example(name="defaults", args=[], expect=["Zoom: 1.0x", "Iter: 100"]),
    Example(name="fractal-julia", args=["--fractal", "julia", "--julia-real", "-0.8", "--julia-imag", "0.156"]),
    Example(name="fractal-burningship", args=["--fractal", "burningship", "--center-x", "-0.4", "--center-y", "-0.6"]),
    Example(name="fractal-tricorn", args=["--fractal", "tricorn", "--center-x", "0"]),
    Example(name="fractal-multibrot3", args=["--fractal", "multibrot3", "--center-x", "0", "--range-x", "3"]),
    Example(name="fractal-multibrot4", args=["--fractal", "multibrot4", "--center-x", "0", "--range-x", "3"]),
    Example(name="fractal-phoenix", args=["--fractal", "phoenix"]),
    Example(name="fractal-perpendicular", args=["--fractal", "perpendicular"]),
    Example(name="iterations", args=["--iterations", "250"], expect=["Iter: 250"]),
    Example(name="color-scheme", args=["--color-scheme", "psychedelic"]),
    Example(name="matplotlib-colormap", args=["--color-scheme", "twilight_shifted"]),
    Example(name="no-smooth", args=["--no-smooth", "--color-scheme", "grayscale"]),
    Example(name="wide-canvas", args=["--width", "300", "--height", "80"]),
    Example(name="tall-canvas", args=["--width", "80", "--height", "300"]),
    Example(name="select", args=["--select", "60", "30", "100", "60"], expect=["Zoom: 4.0x"]),
    Example(name="select-twice", args=["--select", "40", "20", "120", "100", "--select", "40", "20", "120", "100"]),
    Example(name="select-too-small", args=["--select", "10", "10", "18", "18"], expect=["too small", "Zoom: 1.0x"]),
    Example(name="fit-aspect", args=["--select", "60", "30", "100", "40", "--fit-aspect"]),
    Example(name="chunk-rows", args=["--chunk-rows", "7"]),
    Example(name="show-status", args=["--show-status"]),
    Example(name="verbose", args=["--verbose"]),
]


def _run(example: Example) -> None:
    env = dict(os.environ, MPLBACKEND="Agg")
    completed = subprocess.run(example.full_args(), check=True, capture_output=True, text=True, env=env)
    for text in example.expect:
        if text not in completed.stdout:
            raise RuntimeError(f"Example {example.name} did not print {text!r}:\n{completed.stdout}")


def main() -> None:
    for example in EXAMPLES:
        print(f"\n[cli-example] {example.name}")
        _run(example)
    print("\nAll CLI examples ran successfully.")


if __name__ == "__main__":
    main()
