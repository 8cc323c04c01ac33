"""Unit tests for pgprefs.api.StageResult and the CLI stage runner."""

from collections.abc import Iterator

import pytest

from pgprefs.api.StageResult import StageResult
from pgprefs.cli._run_single_execution import _run_single_execution


def _stages(success: bool):
    def cmd() -> StageResult:
        def progress(result: StageResult) -> Iterator[tuple[float, str]]:
            yield (0.5, "Working")
            result.result = "Done" if success else "Failed"
            result.output = {"errors": [], "warnings": ["careful"]}
            result.success = success

        return StageResult(announce="Testing", progress_callback=progress)

    return cmd


class RecordingDisplay:
    def __init__(self):
        self.lines = []

    def __getattr__(self, name):
        return lambda message, **kwargs: self.lines.append((name, message))


def test_stage_result_initialization():
    """Test that StageResult initializes correctly."""
    result = _stages(True)()
    assert result.announce == "Testing"
    assert result.result == ""
    assert result.output == {}
    assert result.success is False


@pytest.mark.parametrize("success, code", [(True, 0), (False, 1)])
def test_run_single_execution(success, code):
    display = RecordingDisplay()
    with pytest.raises(SystemExit) as exc_info:
        _run_single_execution(_stages(success), (), {}, display, "yaml")
    assert exc_info.value.code == code
    kinds = [kind for kind, _ in display.lines]
    assert kinds == ["status", "info", "success" if success else "error", "warning", "json_output"]


def test_empty_result_is_a_bug():
    def cmd() -> StageResult:
        def progress(result: StageResult) -> Iterator[tuple[float, str]]:
            yield (1.0, "Complete")

        return StageResult(announce="Testing", progress_callback=progress)

    with pytest.raises(ValueError):
        _run_single_execution(cmd, (), {}, RecordingDisplay(), "yaml")
