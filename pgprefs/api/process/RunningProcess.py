"""Running process snapshot DTO."""

from dataclasses import dataclass, field


@dataclass
class RunningProcess:
    """A process seen in the process table."""

    pid: int
    """Process ID."""

    ppid: int
    """Parent process ID."""

    user: str
    """Owning account name (empty if the OS refused to say)."""

    name: str
    """Executable name."""

    args: list[str] = field(default_factory=list)
    """Full argument vector, empty if the OS refused access."""

    @property
    def command(self) -> str:
        return " ".join(self.args) if self.args else self.name
