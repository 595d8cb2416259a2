"""
Flexible test automation with Python for treeforge.

To run all sessions, run the following command:
$ nox

To run a specific session, run the following command:
$ nox -s <session-name>

To run a session with additional arguments, run the following command:
$ nox -s <session-name> -- <additional-arguments>

To list all available sessions, run the following command:
$ nox -l
"""

import os
from pathlib import Path

import nox
import tomli
from nox.sessions import Session

# default sessions to run (sorted alphabetically)
nox.options.sessions = ["bandit", "black", "flake8", "isort", "mypy", "python"]

# reuse virtual environment for all sessions
nox.options.reuse_venv = "always"

# use venv as the default virtual environment backend
nox.options.default_venv_backend = "venv"


def install_requirements(session: Session) -> None:
    """Install requirements for all sessions."""
    session.install("-e", ".[dev,test]")


def parse_supported_python_versions() -> list[str]:
    """Parse supported Python versions from pyproject.toml."""
    pyproject_path = Path("pyproject.toml")
    pyproject = tomli.loads(pyproject_path.read_text())
    classifiers: list[str] = pyproject["project"]["classifiers"]

    result = []
    for c in classifiers:
        if c.startswith("Programming Language :: Python :: 3") and "." in c:
            result.append(c.split("::")[-1].strip())

    return result


@nox.session()
def bandit(session: Session) -> None:
    """Run bandit on treeforge directory and noxfile.py."""
    install_requirements(session)
    cmd = "bandit -c pyproject.toml -r treeforge noxfile.py"
    session.run(*cmd.split(), *session.posargs, silent=True)


@nox.session()
def black(session: Session) -> None:
    """Run black on treeforge and tests directories and noxfile.py."""
    install_requirements(session)
    cmd = "black --check --diff treeforge tests noxfile.py"
    session.run(*cmd.split(), *session.posargs, silent=True)


@nox.session()
def flake8(session: Session) -> None:
    """Run flake8 on treeforge and tests directories and noxfile.py."""
    install_requirements(session)
    cmd = "flake8 --max-line-length 100 treeforge tests noxfile.py"
    session.run(*cmd.split(), *session.posargs, silent=True)


@nox.session()
def isort(session: Session) -> None:
    """Run isort on treeforge and tests directories and noxfile.py."""
    install_requirements(session)
    cmd = "isort --check --diff --color treeforge tests noxfile.py"
    session.run(*cmd.split(), *session.posargs, silent=True)


@nox.session()
def mypy(session: Session) -> None:
    """Run mypy on treeforge and tests directories and noxfile.py."""
    install_requirements(session)
    cmd = "mypy --install-types --non-interactive treeforge tests noxfile.py"
    session.run(*cmd.split(), *session.posargs, silent=True)


@nox.session(name="python", python=parse_supported_python_versions())
def unit_tests(session: Session) -> None:
    """Run unit tests and generate coverage report."""
    install_requirements(session)
    # disable color output in GitHub Actions
    env = {"TERM": "dumb"} if os.getenv("CI") == "true" else None
    cmd = "pytest --log-level=DEBUG --cov=treeforge --cov-config=pyproject.toml --cov-report=term --cov-report=html --cov-report=xml --no-cov-on-fail tests/unit"
    session.run(*cmd.split(), *session.posargs, env=env)
