"""Practice buffers and editor session tracking for challenges."""
import difflib
import logging
import os
import shlex
import subprocess
import tempfile
import time
from dataclasses import dataclass, replace
from pathlib import Path

from nvim_mastery.models import CatalogEntry

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "nvim"

# Suggest completion once a session has this much activity.
MIN_ACTIONS = 10
MIN_SECONDS = 30

MOTIONS_PRACTICE = """Welcome to Neovim Motions Practice!

Line 2: Navigate here using j (down)
Line 3: Try moving with k (up)
Line 4: Use h and l for left and right
Line 5: Practice word movements with w and b

TARGET LINE - Navigate here using line number commands
Line 7: Use 0 to go to beginning of line
Line 8: Use $ to go to end of line
Line 9: Try gg to go to top, G to go to bottom

PRACTICE GOALS:
- Navigate to line 6 using movement commands
- Move cursor to the word "TARGET" using hjkl
- Return to beginning of file using gg
- Jump to end of file using G
- Practice word boundaries with w, b, e

Remember: h=left, j=down, k=up, l=right
No arrow keys allowed!"""

EDITING_PRACTICE = """Editing Practice - Text Manipulation

const oldVariableName = "hello";
const anotherBadName = "world";
const unnecessaryLine = "delete this line";
const keepThisOne = "important data";

TASKS:
1. Change 'oldVariableName' to 'newName' using ciw
2. Delete the word 'anotherBadName' using diw
3. Delete the entire 'unnecessaryLine' using dd
4. Practice with text objects: ci", ci(, ci{

function example(oldParam) {
    return "change this string";
}

Practice these commands:
- ciw (change inner word)
- diw (delete inner word)
- dd (delete line)
- cw (change word)
- dw (delete word)"""

SEARCH_PRACTICE = """Search Practice - Finding and Replacing

The quick brown fox jumps over the lazy dog.
The fox is quick and the dog is lazy.
A fox and a dog are both animals.
Quick foxes are faster than lazy dogs.

SEARCH TASKS:
1. Search for 'fox' using /fox
2. Navigate between matches using n and N
3. Search backwards for 'dog' using ?dog
4. Use * to search for word under cursor
5. Use # for backward search of word under cursor

REPLACE TASKS:
1. Replace first 'fox' with 'cat': :s/fox/cat/
2. Replace all 'fox' on line: :s/fox/cat/g
3. Replace all in file: :%s/dog/puppy/g"""

WINDOWS_PRACTICE = """Windows and Splits Practice

This is the main window content.
Practice window management commands here.

WINDOW COMMANDS TO PRACTICE:
1. :split or :sp - horizontal split
2. :vsplit or :vsp - vertical split
3. Ctrl+w + h/j/k/l - move between windows
4. Ctrl+w + = - equalize window sizes
5. Ctrl+w + _ - maximize height
6. Ctrl+w + | - maximize width
7. :close or Ctrl+w + c - close window

TAB COMMANDS:
1. :tabnew - new tab
2. :tabclose - close tab
3. gt or :tabnext - next tab
4. gT or :tabprev - previous tab
5. :tabmove - move tab position"""

VISUAL_PRACTICE = """Visual Mode Practice

function calculateTotal(items) {
    let total = 0;
    for (const item of items) {
        total += item.price * item.quantity;
    }
    return total;
}

const config = {
    debug: true,
    version: "1.0.0",
    features: ["auth", "api", "ui"]
};

VISUAL MODE TASKS:
1. Select 'calculateTotal' using v and w/e
2. Select entire function using V (line visual)
3. Select the object block using Ctrl+v (block visual)
4. Practice text objects: vip, vap, vi", vi(, vi{

After selection, try:
- d: delete selection
- y: yank (copy) selection
- c: change selection
- >: indent selection"""

TEMPLATES = {
    "motions": MOTIONS_PRACTICE,
    "editing": EDITING_PRACTICE,
    "search": SEARCH_PRACTICE,
    "windows": WINDOWS_PRACTICE,
    "visual": VISUAL_PRACTICE,
}


def _default_practice(entry: CatalogEntry) -> str:
    criteria = "\n".join(f"- {c}" for c in entry.acceptance_criteria)
    return f"""Neovim Practice Session

Welcome to your practice session for: {entry.title}

Challenge Description:
{entry.description}

Acceptance Criteria:
{criteria}

Some sample text to practice on:
Lorem ipsum dolor sit amet, consectetur adipiscing elit.
Sed do eiusmod tempor incididunt ut labore et dolore magna aliqua.
Ut enim ad minim veniam, quis nostrud exercitation ullamco.

Happy practicing!"""


def practice_template(entry: CatalogEntry, primary_tag: str | None = None) -> str:
    """Seed text for practicing a challenge, chosen by its primary tag.

    Tags are unordered once loaded, so the caller may name the primary tag;
    otherwise the first template tag the entry carries is used.
    """
    if primary_tag is None:
        primary_tag = next((t for t in TEMPLATES if t in entry.tags), None)
    template = TEMPLATES.get(primary_tag)
    return template if template is not None else _default_practice(entry)


@dataclass(frozen=True)
class EditorAction:
    type: str
    timestamp: float
    data: tuple = ()


@dataclass(frozen=True)
class EditorSession:
    challenge_id: int
    started_at: float
    actions: tuple = ()


def start_editor_session(challenge_id: int, now: float | None = None) -> EditorSession:
    return EditorSession(challenge_id=challenge_id, started_at=time.time() if now is None else now)


def track_action(session: EditorSession, action_type: str, data: tuple = (), now: float | None = None) -> EditorSession:
    action = EditorAction(type=action_type, timestamp=time.time() if now is None else now, data=data)
    return replace(session, actions=session.actions + (action,))


def ready_to_complete(session: EditorSession, now: float | None = None) -> bool:
    elapsed = (time.time() if now is None else now) - session.started_at
    return len(session.actions) > MIN_ACTIONS and elapsed > MIN_SECONDS


def session_stats(session: EditorSession | None, now: float | None = None) -> dict:
    if session is None:
        return {"duration": "0s", "actions": 0}
    elapsed = int((time.time() if now is None else now) - session.started_at)
    minutes, seconds = divmod(elapsed, 60)
    return {
        "duration": f"{minutes}m {seconds}s" if minutes > 0 else f"{seconds}s",
        "actions": len(session.actions),
    }


def diff_actions(before: str, after: str) -> list[tuple[str, str]]:
    """Line-level edits between two buffer states as (kind, line) pairs."""
    actions = []
    for line in difflib.ndiff(before.splitlines(), after.splitlines()):
        if line.startswith("+ "):
            actions.append(("insert", line[2:]))
        elif line.startswith("- "):
            actions.append(("delete", line[2:]))
    return actions


def resolve_editor() -> list[str]:
    return shlex.split(os.environ.get("EDITOR") or DEFAULT_EDITOR)


def edit_buffer(text: str, editor: list[str] | None = None) -> str:
    """Open text in the user's editor and return the saved result."""
    command = editor or resolve_editor()
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "practice.txt"
        path.write_text(text, encoding="utf-8")
        logger.debug("Launching %s on %s", command, path)
        subprocess.run([*command, str(path)], check=True)
        return path.read_text(encoding="utf-8")
