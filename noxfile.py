"""nox build configuration for seldonfake."""

from __future__ import annotations

import nox
from nox_uv import session

# Default sessions
nox.options.sessions = ["lint", "typing", "test"]

# Other nox defaults
nox.options.default_venv_backend = "uv"
nox.options.reuse_existing_virtualenvs = True


@session(uv_extras=["dev"])
def lint(session: nox.Session) -> None:
    """Run ruff over the source and tests."""
    session.install("ruff")
    session.run("ruff", "check", "noxfile.py", "src", "tests")
    session.run("ruff", "format", "--check", "noxfile.py", "src", "tests")


@session(uv_extras=["dev"])
def test(session: nox.Session) -> None:
    """Run the test suite."""
    session.run("pytest", *session.posargs)


@session(uv_extras=["dev"])
def typing(session: nox.Session) -> None:
    """Check type annotations with mypy."""
    session.run(
        "mypy",
        *session.posargs,
        "noxfile.py",
        "src",
        "tests",
    )
