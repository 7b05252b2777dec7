"""
Module: cli_formatter
Purpose: Centralized CLI formatting utilities for astrofold output.
"""

from __future__ import annotations

import os
import sys
import textwrap
from dataclasses import dataclass
from typing import Iterable, TextIO

from .utils import BOLD, COLOR_RESET, color_256, osc8_link

DEFAULT_LINE_WIDTH = 96
PALETTE_CODES: dict[str, int] = {
    "primary": 74,
    "accent": 141,
    "ok": 64,
    "warn": 221,
    "error": 160,
    "link": 33,
    "muted": 243,
}
# Report line labels mapped to palette levels.
REPORT_LEVELS = {
    "SKIPPED": "muted",
    "SYMLINK": "muted",
    "BLOCKED": "warn",
    "UNCHANGED": "muted",
    "RENAMED": "success",
    "CREATED": "success",
    "MERGED": "accent",
    "MARKED": "accent",
    "CONFLICT": "warn",
    "SUMMARY": "info",
}


@dataclass
class FormatterConfig:
    """
    Configuration options governing CLIFormatter output.
    """

    use_color: bool = True
    unicode_enabled: bool = True
    plain_mode: bool = False
    osc8_links: bool = True
    verbose: bool = False
    mode: str = "tty"
    pipe_mode: bool = False


class CLIFormatter:
    """
    Render astrofold CLI output via a centralized contract.
    """

    def __init__(
        self,
        config: FormatterConfig | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self.config = config or FormatterConfig()
        self.stream = stream or sys.stdout
        self.line_width = DEFAULT_LINE_WIDTH
        self.palette = {key: color_256(code) for key, code in PALETTE_CODES.items()}

    # ------------------------------------------------------------------- styles
    def line(self, text: str = "") -> None:
        """Print a plain line."""
        self._write(text)

    def blank(self) -> None:
        """Print an empty line."""
        self._write("")

    def section(self, title: str, icon: str | None = "◆") -> None:
        """Print a section heading."""
        label = title
        if icon:
            symbol = ">" if self.config.plain_mode or not self.config.unicode_enabled else icon
            label = f"{symbol} {title}"
        self.blank()
        self._write(self._style(label, self.palette["primary"], bold=True))

    def warning(self, text: str) -> None:
        self._write(self._style(text, self.palette["warn"], bold=True))

    def muted(self, text: str) -> None:
        self._write(self._style(text, self.palette["muted"]))

    def verbose(self, text: str) -> None:
        """Print verbose diagnostics when enabled."""
        if not self.config.verbose:
            return
        self.muted(f"[verbose] {text}")

    def report_line(self, text: str) -> None:
        """Print one run report line, colored by its leading label."""
        label = text.split(" ", 1)[0]
        self._write(self.label(text, REPORT_LEVELS.get(label, "plain"), bold=False))

    def failure_summary(
        self,
        *,
        header: str = "STOP/BLOCKED",
        reason: str,
        files_changed: str | None = None,
        log_hint: str | None = None,
        remediation: list[str] | None = None,
    ) -> None:
        """
        Render a standardized failure block.
        """
        if self.config.pipe_mode:
            return
        if remediation:
            required = remediation[0]
        elif log_hint:
            required = f"Review {log_hint} for details."
        else:
            required = "Review the error and rerun when ready."
        self.blank()
        lines = [f"Reason: {reason}"]
        if files_changed:
            lines.append(f"Files changed: {files_changed}")
        if log_hint:
            lines.append(f"Log file: {log_hint}")
        lines.append(f"Required: {required}")
        self.frame(header, lines)

    def frame(self, title: str, lines: list[str]) -> None:
        """
        Render a framed block with wrapped content.
        """
        width = self.line_width
        unicode = self.config.unicode_enabled and not self.config.plain_mode
        horiz = "─" if unicode else "-"
        vert = "│" if unicode else "|"
        tl, tr, bl, br = ("┌", "┐", "└", "┘") if unicode else ("+", "+", "+", "+")
        title_text = f"{horiz} {title} "
        self.line(f"{tl}{title_text}{horiz * max(0, width - 2 - len(title_text))}{tr}")
        content_width = width - 4
        for line in lines:
            for chunk in textwrap.wrap(line, width=content_width) or [""]:
                self.line(f"{vert} {chunk.ljust(content_width)} {vert}")
        self.line(f"{bl}{horiz * (width - 2)}{br}")

    def list_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.report_line(line)

    def link(self, path: str, label: str | None = None) -> str:
        """Return a styled hyperlink for capable terminals."""
        target = label or path
        if not self._osc8_enabled():
            return target
        return self._style(osc8_link(path, target), self.palette["link"])

    def label(self, text: str, level: str = "info", *, bold: bool = True) -> str:
        """Return a styled inline label for embedding in other strings."""
        if level == "plain":
            return self._style(text, None, bold=bold)
        color = {
            "info": self.palette["primary"],
            "accent": self.palette["accent"],
            "success": self.palette["ok"],
            "warn": self.palette["warn"],
            "error": self.palette["error"],
            "muted": self.palette["muted"],
        }.get(level, self.palette["primary"])
        return self._style(text, color, bold=bold)

    # ----------------------------------------------------------------- internals
    def _write(self, text: str) -> None:
        self.stream.write(text + "\n")

    def _style(self, text: str, color: str | None = None, bold: bool = False) -> str:
        if not self.config.use_color or not text:
            return text
        prefix = ""
        if bold:
            prefix += BOLD
        if color:
            prefix += color
        if not prefix:
            return text
        return f"{prefix}{text}{COLOR_RESET}"

    def _osc8_enabled(self) -> bool:
        return self.config.osc8_links and self.config.use_color and not self.config.plain_mode


def detect_terminal_capabilities(
    *,
    color_preference: str | None = None,
    plain_mode: bool = False,
    no_color_flag: bool = False,
    stdout_isatty: bool | None = None,
    mode_preference: str = "auto",
) -> FormatterConfig:
    """
    Determine formatter configuration based on environment cues.
    """
    mode_normalized = (mode_preference or "auto").lower()
    if mode_normalized not in {"auto", "tty", "plain", "pipe"}:
        mode_normalized = "auto"

    if stdout_isatty is None:
        stdout_isatty = sys.stdout.isatty()

    env_no_color = bool(os.environ.get("NO_COLOR"))
    env_plain = bool(os.environ.get("ASTROFOLD_PLAIN"))
    pipe_mode = mode_normalized == "pipe" or (mode_normalized == "auto" and not stdout_isatty)
    if plain_mode or env_plain or mode_normalized == "plain" or pipe_mode:
        return FormatterConfig(
            use_color=False,
            unicode_enabled=False,
            plain_mode=True,
            osc8_links=False,
            mode="pipe" if pipe_mode else "plain",
            pipe_mode=pipe_mode,
        )

    term = os.environ.get("TERM", "").lower()
    preference = (color_preference or os.environ.get("ASTROFOLD_COLOR", "auto")).lower()
    if preference not in {"auto", "always", "never"}:
        preference = "auto"
    if preference == "always":
        use_color = True
    elif preference == "never":
        use_color = False
    else:
        use_color = not no_color_flag and not env_no_color and stdout_isatty and term != "dumb"

    unicode_enabled = term != "dumb" and _supports_unicode()
    return FormatterConfig(
        use_color=use_color,
        unicode_enabled=unicode_enabled,
        plain_mode=False,
        osc8_links=use_color and stdout_isatty,
        mode="tty",
        pipe_mode=False,
    )


def _supports_unicode() -> bool:
    encoding = getattr(sys.stdout, "encoding", None)
    if not encoding:
        return False
    try:
        "┌".encode(encoding)
        return True
    except UnicodeEncodeError:
        return False
