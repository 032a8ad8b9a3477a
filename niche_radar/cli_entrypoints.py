#!/usr/bin/env python3
"""Console-script wrappers for the niche trend finder.

After an editable install (``pip install -e .``) the following commands become
available system-wide:

* ``niche-radar``         – rank Reddit posts from the niche's subreddits
* ``niche-radar-google``  – rank search trends (Google) instead

Both forward their arguments to ``scripts/find_trends.py`` so there is no
business-logic duplication.
"""
from __future__ import annotations

import sys
from pathlib import Path
from subprocess import run

PYTHON = sys.executable
ROOT = Path(__file__).resolve().parents[1]  # Repository root


def _exec(cmd: list[str]) -> None:  # noqa: WPS421 (subprocess wrapper)
    """Execute *cmd* and propagate its exit status."""
    completed = run(cmd, check=False)
    if completed.returncode:
        sys.exit(completed.returncode)


def _script() -> str:
    return str(ROOT / "scripts/find_trends.py")


# ---------------------------------------------------------------------------
# Entry-points
# ---------------------------------------------------------------------------

def reddit() -> None:
    """Rank the niche's subreddit posts."""
    _exec([PYTHON, _script(), "--source", "reddit", *sys.argv[1:]])


def google() -> None:
    """Rank Google search trends."""
    _exec([PYTHON, _script(), "--source", "google", *sys.argv[1:]])
