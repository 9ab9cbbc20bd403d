"""Test configuration ensuring local package import when editable install not active.

If users invoke `pytest` outside the project's virtualenv, we still add the project
root to sys.path so `import classes` works.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from classes.work_item_models import Revision, WorkItem  # noqa: E402


@pytest.fixture
def make_item():
    """Build a WorkItem from a creation time and a list of (new_state, changed_at) steps.

    The first step is the creation revision; each later step changes the state.
    """

    def _make(item_id, created_at, steps, state=None):
        revisions = []
        previous = None
        for number, (new_state, changed_at) in enumerate(steps, start=1):
            fields = {"System.State": new_state, "System.ChangedDate": changed_at.isoformat()}
            revisions.append(Revision(number, changed_at, fields, previous))
            previous = fields
        final_state = state if state is not None else steps[-1][0]
        return WorkItem(item_id, created_at, final_state, revisions)

    return _make
