"""What a pgprefs command hands back to the CLI."""

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field


@dataclass
class StageResult:
    """A server command in four stages: announce, progress, result, output.

    The CLI prints ``announce`` first, then drains ``progress_callback``,
    which performs the launchd work and yields ``(fraction, message)`` pairs
    while filling in ``result``, ``output`` and ``success`` on this object.
    """

    announce: str
    progress_callback: Callable[["StageResult"], Iterator[tuple[float, str]]]
    result: str = ""
    output: dict = field(default_factory=dict)
    success: bool = False
