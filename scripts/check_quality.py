#!/usr/bin/env python3
"""Run the pgprefs lint, format and type checks."""

import argparse
import subprocess
import sys
from pathlib import Path

from rich.console import Console

console = Console()


def _tool(name: str) -> str:
    """Prefer the copy installed next to the running interpreter."""
    candidate = Path(sys.executable).parent / name
    return str(candidate) if candidate.exists() else name


def run_check(command: list[str], description: str) -> bool:
    console.print(f"[bold blue]Running {description}...[/bold blue]")
    try:
        result = subprocess.run([_tool(command[0]), *command[1:]], check=False, capture_output=True, text=True)
    except OSError as e:
        console.print(f"[bold red]Cannot run {command[0]}: {e}[/bold red]")
        return False
    if result.returncode != 0:
        console.print(f"[bold red]FAILED: {description}[/bold red]")
        console.print(result.stdout)
        console.print(result.stderr)
        return False
    console.print(f"[bold green]PASSED: {description}[/bold green]")
    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="Run ruff and mypy over pgprefs")
    parser.add_argument("--fix", action="store_true", help="Auto-fix formatting and lint issues")
    parser.add_argument("files", nargs="*", help="Files to check (default: pgprefs tests)")
    args = parser.parse_args()

    targets = args.files or ["pgprefs", "tests"]
    fix = ["--fix"] if args.fix else []
    checks = [
        (["ruff", "format", *([] if args.fix else ["--check"]), *targets], "Ruff Formatting"),
        (["ruff", "check", *fix, *targets], "Ruff Linting"),
        (["mypy", "pgprefs"], "Mypy Type Checking"),
    ]
    results = [run_check(command, description) for command, description in checks]
    if not all(results):
        sys.exit(1)


if __name__ == "__main__":
    main()
