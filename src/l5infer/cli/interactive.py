"""Interactive REPL for the L5 type inferencer."""

from __future__ import annotations

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.history import FileHistory, InMemoryHistory
from rich import get_console
from rich.console import Console
from rich.markup import escape

from l5infer.api import infer_type_of
from l5infer.config.settings import InferSettings
from l5infer.core.primitives import PRIMITIVES
from l5infer.surface.parser import KEYWORDS

QUIT_COMMANDS = (",quit", ",q", ",exit")
HELP_TEXT = """\
Enter an L5 expression to see its type, e.g.
  (lambda (x : number) : number (+ x 1))
Commands: ,help  ,quit"""


class InteractiveCli:
    """Read an expression, print its type, repeat."""

    def __init__(self, settings: InferSettings, *, console: Console | None = None, persist_history: bool = True):
        self._settings = settings
        self._console = console if console is not None else get_console()
        self._persist_history = persist_history
        self._session: PromptSession[str] | None = None

    def run(self) -> None:
        self._console.print("[bold]l5infer[/bold] - type ,help for help, ,quit to exit")
        session = self._build_prompt()
        while True:
            try:
                raw = session.prompt(FormattedText([("bold", "l5> ")]))
            except KeyboardInterrupt:
                self._console.print("Interrupted. Use ',quit' to exit.")
                continue
            except EOFError:
                break
            if not self.handle(raw):
                break
        self._console.print("Bye.")

    def handle(self, raw: str) -> bool:
        """Process one line of input. Returns False when the session should end."""
        line = raw.strip()
        if not line:
            return True
        if line in QUIT_COMMANDS:
            return False
        if line == ",help":
            self._console.print(escape(HELP_TEXT))
            return True
        text = infer_type_of(
            line, tvar_prefix=self._settings.tvar_prefix, max_depth=self._settings.recursion_limit
        )
        self._console.print(escape(text))
        return True

    def _build_prompt(self) -> PromptSession[str]:
        if self._session is not None:
            return self._session
        if self._persist_history:
            history_file = self._settings.resolve_history_file()
            history_file.parent.mkdir(parents=True, exist_ok=True)
            history: FileHistory | InMemoryHistory = FileHistory(str(history_file))
        else:
            history = InMemoryHistory()
        words = sorted(KEYWORDS | set(PRIMITIVES) | {"number", "boolean", "string", "void"})
        completer = WordCompleter(words, ignore_case=False, sentence=True)
        self._session = PromptSession(history=history, completer=completer, complete_while_typing=False)
        return self._session
