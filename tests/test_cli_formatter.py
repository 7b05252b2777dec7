import io
import sys

from astrofold.cli_formatter import (
    DEFAULT_LINE_WIDTH,
    CLIFormatter,
    FormatterConfig,
    detect_terminal_capabilities,
)


def _make_formatter(**overrides):
    config = FormatterConfig(**overrides)
    stream = io.StringIO()
    return CLIFormatter(config, stream=stream), stream


def test_failure_summary_renders_stop_frame():
    formatter, stream = _make_formatter(use_color=False, unicode_enabled=False)
    formatter.failure_summary(reason="Test failure", remediation=["Retry once the error is resolved."])
    output = stream.getvalue()
    assert "STOP/BLOCKED" in output
    assert "Reason: Test failure" in output
    assert "Required: Retry once the error is resolved." in output


def test_failure_summary_is_silent_in_pipe_mode():
    formatter, stream = _make_formatter(pipe_mode=True)
    formatter.failure_summary(reason="Test failure")
    assert stream.getvalue() == ""


def test_formatter_sections_and_links_are_structured():
    formatter, stream = _make_formatter(use_color=False, unicode_enabled=False)
    formatter.section("Test Section", icon=">")
    formatter.line(f"Link: {formatter.link('/tmp/report', 'report')}")
    formatter.list_lines(["MERGED    M42 -> M 42 (1 file moved)"])

    lines = stream.getvalue().splitlines()
    assert lines[0] == ""  # leading newline from section()
    assert lines[1] == "> Test Section"
    assert lines[2] == "Link: report"
    assert lines[3] == "MERGED    M42 -> M 42 (1 file moved)"


def test_report_lines_are_colored_by_label():
    formatter, stream = _make_formatter(use_color=True)
    formatter.report_line("CONFLICT  a vs b (already present)")
    formatter.report_line("something else")
    first, second = stream.getvalue().splitlines()
    assert first.startswith(formatter.palette["warn"])
    assert first.endswith("CONFLICT  a vs b (already present)\033[0m")
    assert second == "something else"


def test_verbose_only_when_enabled():
    formatter, stream = _make_formatter(use_color=False, verbose=False)
    formatter.verbose("hidden")
    assert stream.getvalue() == ""
    formatter.config.verbose = True
    formatter.verbose("shown")
    assert stream.getvalue() == "[verbose] shown\n"


def test_frame_respects_line_width_ascii():
    formatter, stream = _make_formatter(use_color=False, unicode_enabled=False)
    formatter.frame("STOP/BLOCKED", ["Reason: A failure occurred.", "Required: Retry later."])
    lines = stream.getvalue().splitlines()
    assert all(len(line) == DEFAULT_LINE_WIDTH for line in lines)
    assert lines[0].startswith("+- STOP/BLOCKED ")


def test_detect_terminal_capabilities_plain_mode():
    config = detect_terminal_capabilities(plain_mode=True)
    assert config.plain_mode
    assert not config.use_color
    assert not config.unicode_enabled


def test_detect_terminal_capabilities_no_color_env(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")
    config = detect_terminal_capabilities(stdout_isatty=True, mode_preference="tty")
    assert not config.use_color


def test_detect_terminal_capabilities_pipe_when_not_a_tty():
    config = detect_terminal_capabilities(stdout_isatty=False)
    assert config.pipe_mode
    assert config.mode == "pipe"


def test_detect_terminal_capabilities_color_preference_overrides_tty(monkeypatch):
    class DummyStdout(io.StringIO):
        encoding = "utf-8"

        def isatty(self):
            return False

    monkeypatch.setattr(sys, "stdout", DummyStdout())
    config = detect_terminal_capabilities(color_preference="always", mode_preference="tty")
    assert config.use_color
