"""
Colours for minusagent's terminal output: speaker labels (agent, user, System, Error),
bracketed step tags such as [Execute(ls)] and the REPL welcome header.

Colour is switched off when NO_COLOR is set or stdout is not a terminal, so piped or
captured output stays plain text.

Usage:
    from minusagent.cli.style import styler
    print(styler.tag("shell", "warn"), command)
    print(styler.color("error", "Error: ") + message)
"""
from __future__ import annotations

import os
import sys
import shutil
from dataclasses import dataclass
import colorama

colorama.init()


def is_color_enabled() -> bool:
    if os.getenv("NO_COLOR"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


@dataclass(frozen=True)
class Palette:
    accent: str
    info: str
    success: str
    warn: str
    error: str
    dim: str
    user: str
    reset: str


DEFAULT_PALETTE = Palette(
    accent=colorama.Fore.LIGHTMAGENTA_EX + colorama.Style.BRIGHT,
    info=colorama.Fore.CYAN,
    success=colorama.Fore.LIGHTGREEN_EX,
    warn=colorama.Fore.LIGHTYELLOW_EX + colorama.Style.BRIGHT,
    error=colorama.Fore.LIGHTRED_EX + colorama.Style.BRIGHT,
    dim=colorama.Style.DIM,
    user=colorama.Fore.LIGHTCYAN_EX + colorama.Style.BRIGHT,
    reset=colorama.Style.RESET_ALL,
)


class Styler:
    def __init__(self, palette: Palette = DEFAULT_PALETTE, enabled: bool | None = None) -> None:
        self.palette = palette
        self.enabled = is_color_enabled() if enabled is None else enabled

    def apply(self, color_code: str, text: str) -> str:
        if self.enabled and color_code:
            return f"{color_code}{text}{self.palette.reset}"
        return text

    def color(self, kind: str, text: str) -> str:
        return self.apply(getattr(self.palette, kind, self.palette.accent), text)

    def tag(self, name: str, kind: str = "accent") -> str:
        left = self.apply(self.palette.dim, "[")
        right = self.apply(self.palette.dim, "]")
        return f"{left}{self.color(kind, name)}{right}"

    def divider(self, ch: str = "-", width: int | None = None) -> str:
        cols = shutil.get_terminal_size(fallback=(80, 24)).columns
        w = max(20, min(cols, width or cols))
        return ch * w

    def header(self, title: str, ch: str = "-") -> str:
        line = self.divider(ch=ch)
        t = f" {title.strip()} "
        return f"{self.apply(self.palette.accent, t)}\n{self.apply(self.palette.dim, line)}"


# Shared singleton
styler = Styler()
