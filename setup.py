from setuptools import find_packages, setup

setup(
    name="pgprefs",
    version="0.1.0",
    description="Lifecycle controller for local PostgreSQL servers supervised by launchd",
    packages=find_packages(include=["pgprefs", "pgprefs.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0",  # Configuration and command output schemas
        "typer<0.26",  # CLI; 0.26+ vendors click, hiding the context from click.get_current_context
        "click",  # Prompts and exit codes under typer
        "rich",  # Terminal formatting
        "pyyaml",  # YAML command output
        "psutil",  # Process table lookups
    ],
    extras_require={
        "test": [
            "pytest>=7.0",  # Testing framework
            "pytest-timeout>=2.1",  # Test timeouts
            "pytest-xdist>=3.0",  # Parallel test execution
        ],
        "dev": [
            "ruff",  # Linting and formatting
            "mypy",  # Static type checking
            "types-psutil",  # Type stubs
            "types-PyYAML",  # Type stubs
            "types-setuptools",  # Type stubs
        ],
    },
    entry_points={
        "console_scripts": [
            "pgprefs=pgprefs.cli:main",
        ],
    },
)
