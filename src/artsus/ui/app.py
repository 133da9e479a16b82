from __future__ import annotations

import threading

from textual.app import App, ComposeResult
from textual.containers import Vertical, VerticalScroll
from textual.widgets import Input, RichLog, Static

from artsus.content.answers import AnswerGenerator
from artsus.domain.enums import InvestigationOutcome, SuspectStatus
from artsus.domain.models import Game
from artsus.engine import GameEngine
from artsus.errors import ArtsusError, AnswerTimeout, WaitCancelled

STATUS_MARKS = {
    SuspectStatus.NEITHER: " ",
    SuspectStatus.FREE: "x",
    SuspectStatus.FLED: "!",
}


class SuspectsApp(App):
    TITLE = "Artificial Suspects"
    BINDINGS = [
        ("f6", "focus_log", "Focus log"),
        ("f7", "focus_detail", "Focus detail"),
        ("f8", "focus_input", "Focus input"),
    ]
    CSS = """
    Screen {
        layout: vertical;
    }
    #header {
        height: auto;
        padding: 1 1;
    }
    #log {
        height: 1fr;
        border: solid $secondary;
        padding: 0 1;
    }
    #detail {
        height: 1fr;
        border: solid $secondary;
        padding: 0 1;
    }
    #menu {
        height: auto;
        padding: 1 1;
    }
    #command {
        height: 3;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        engine: GameEngine,
        player_uuid: str,
        model: str | None = None,
        generator: AnswerGenerator | None = None,
    ) -> None:
        super().__init__()
        self.engine = engine
        self.player_uuid = player_uuid
        self.generator = generator
        self._cancel = threading.Event()
        if model:
            self.game = engine.new_game(player_uuid, model)
        else:
            self.game = engine.current_game(player_uuid)

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("", id="header")
            yield RichLog(id="log", wrap=True, markup=True)
            yield VerticalScroll(Static("", id="detail_view", expand=True), id="detail")
            yield Static(self._menu_text(), id="menu")
            yield Input(placeholder="Suspect number, n, i, a or q...", id="command")

    def on_mount(self) -> None:
        self._refresh()
        self._write(f"Game {self.game.uuid} started.")
        self._announce_round()
        self.query_one("#command", Input).focus()

    def on_unmount(self) -> None:
        self._cancel.set()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        value = event.value.strip().lower()
        event.input.value = ""
        if not value:
            return
        if value == "q":
            self.exit()
            return
        try:
            self._handle_command(value)
        except ArtsusError as exc:
            self._write(f"[red]{exc}[/red]")
        self._refresh()

    def _menu_text(self) -> str:
        return (
            "Commands:\n"
            "<number>) Eliminate suspect\n"
            "n) Next round\n"
            "i) Next investigation\n"
            "a) Get the answer\n"
            "q) Quit"
        )

    def _handle_command(self, value: str) -> None:
        if value.isdigit():
            self._eliminate(int(value))
        elif value == "n":
            self.game = self.engine.advance_round(self.player_uuid)
            self._announce_round()
        elif value == "i":
            self.game = self.engine.advance_investigation(self.player_uuid)
            self._write(f"Investigation {self.game.level} begins.")
            self._announce_round()
        elif value == "a":
            self.run_worker(self._fetch_answer, thread=True, exclusive=True)
        else:
            self._write("Unknown command.")

    def _eliminate(self, number: int) -> None:
        investigation = self.game.investigation
        if number < 1 or number > len(investigation.suspects):
            self._write("No suspect with that number.")
            return
        suspect = investigation.suspects[number - 1]
        result = self.engine.eliminate_suspect(
            suspect.uuid, investigation.current_round.uuid, investigation.uuid
        )
        self.game = self.engine.current_game(self.player_uuid)
        if result.outcome == InvestigationOutcome.FAILED:
            self._write(f"Suspect {number} was the criminal and fled. Game over.")
        else:
            self._write(f"Suspect {number} released, +{result.score_delta} points.")
        if result.outcome == InvestigationOutcome.SOLVED:
            self._write("Only the criminal is left. Type 'i' for the next investigation.")

    def _fetch_answer(self) -> None:
        round_ = self.game.investigation.current_round
        try:
            if self.generator is not None:
                answer = self.engine.get_or_generate_answer(self.player_uuid, self.generator)
            else:
                answer = self.engine.wait_for_answer(round_.uuid, cancel=self._cancel)
        except AnswerTimeout:
            self.call_from_thread(self._write, "The witness did not answer in time.")
            return
        except WaitCancelled:
            return
        except ArtsusError as exc:
            self.call_from_thread(self._write, f"[red]{exc}[/red]")
            return
        self.call_from_thread(self._write, f"Witness: {answer.upper()}")

    def _announce_round(self) -> None:
        round_ = self.game.investigation.current_round
        if round_ is not None:
            self._write(f"Round {len(self.game.investigation.rounds)}: {round_.question.english}")

    def _write(self, message: str) -> None:
        self.query_one("#log", RichLog).write(message)

    def _refresh(self) -> None:
        self.query_one("#header", Static).update(_header_text(self.game))
        self.query_one("#detail_view", Static).update(_suspect_lines(self.game))

    def action_focus_log(self) -> None:
        self.query_one("#log", RichLog).focus()

    def action_focus_detail(self) -> None:
        self.query_one("#detail", VerticalScroll).focus()

    def action_focus_input(self) -> None:
        self.query_one("#command", Input).focus()


def _header_text(game: Game) -> str:
    state = "GAME OVER" if game.game_over else game.investigation.outcome.value
    return (
        f"Level {game.level}  Score {game.score}  Model {game.model}  "
        f"Investigation: {state}"
    )


def _suspect_lines(game: Game) -> str:
    lines = []
    for number, suspect in enumerate(game.investigation.suspects, start=1):
        mark = STATUS_MARKS[suspect.status]
        lines.append(f"({mark}) {number:>2}. {suspect.image}")
    return "\n".join(lines)
