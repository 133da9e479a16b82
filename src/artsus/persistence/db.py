"""SQLite persistence for games, investigations and the content catalogue."""

from __future__ import annotations

from contextlib import contextmanager
import logging
from pathlib import Path
import sqlite3
import threading
from typing import Iterator

from artsus.domain.enums import ModelOrder
from artsus.domain.models import (
    AIModel,
    Description,
    Elimination,
    Game,
    Investigation,
    Player,
    Question,
    Round,
    Service,
    Suspect,
)
from artsus.errors import Conflict, NotFound

logger = logging.getLogger(__name__)

MEMORY = ":memory:"

_MODEL_ORDER = {
    ModelOrder.ID: "rowid",
    ModelOrder.PRICE: "price",
    ModelOrder.WEIGHT: "weight",
}


class GameStore:
    """Storage handle owned by the caller; one per process or per test.

    Every write runs inside ``transaction()``; nested transactions join the
    outermost one, which commits or rolls back as a unit.
    """

    def __init__(self, path: Path | str = MEMORY) -> None:
        self.path = path if path == MEMORY else Path(path)
        if isinstance(self.path, Path):
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(
            str(self.path), check_same_thread=False, isolation_level=None
        )
        self.conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._depth = 0
        self._ensure_schema()

    def close(self) -> None:
        with self._lock:
            self.conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        with self._lock:
            cur = self.conn.cursor()
            if self._depth == 0:
                cur.execute("BEGIN IMMEDIATE")
            self._depth += 1
            try:
                yield cur
            except BaseException:
                self._depth -= 1
                if self._depth == 0:
                    self.conn.rollback()
                raise
            self._depth -= 1
            if self._depth == 0:
                self.conn.commit()

    def _query(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self._lock:
            return self.conn.execute(sql, params).fetchall()

    def _query_one(self, sql: str, params: tuple = ()) -> sqlite3.Row | None:
        with self._lock:
            return self.conn.execute(sql, params).fetchone()

    # Suspects

    def save_suspect(self, suspect: Suspect) -> bool:
        """Insert unless a suspect with the same image exists; True if inserted."""
        with self.transaction() as cur:
            cur.execute("SELECT 1 FROM suspects WHERE image = ?", (suspect.image,))
            if cur.fetchone() is not None:
                return False
            cur.execute(
                "INSERT INTO suspects (uuid, image, timestamp) VALUES (?, ?, ?)",
                (suspect.uuid, suspect.image, suspect.timestamp),
            )
        return True

    def all_suspects(self) -> list[Suspect]:
        rows = self._query("SELECT uuid, image, timestamp FROM suspects ORDER BY rowid")
        return [_suspect(row) for row in rows]

    # Questions

    def save_question(self, question: Question) -> bool:
        """English text is canonical; an existing question is never overwritten."""
        with self.transaction() as cur:
            cur.execute("SELECT 1 FROM questions WHERE english = ?", (question.english,))
            if cur.fetchone() is not None:
                return False
            cur.execute(
                """
                INSERT INTO questions (uuid, english, czech, polish, topic, level)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    question.uuid,
                    question.english,
                    question.czech,
                    question.polish,
                    question.topic,
                    question.level,
                ),
            )
        return True

    def all_questions(self) -> list[Question]:
        rows = self._query(
            "SELECT uuid, english, czech, polish, topic, level FROM questions ORDER BY rowid"
        )
        return [_question(row) for row in rows]

    # Descriptions

    def save_description(self, description: Description) -> None:
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT OR REPLACE INTO descriptions (
                    uuid, suspect_uuid, service, model, description, prompt, timestamp
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    description.uuid,
                    description.suspect_uuid,
                    description.service,
                    description.model,
                    description.description,
                    description.prompt,
                    description.timestamp,
                ),
            )

    def descriptions_for_suspect(
        self, suspect_uuid: str, model: str, strict: bool = False
    ) -> list[Description]:
        """Descriptions made by ``model``; unless strict, fall back to any model's."""
        sql = (
            "SELECT uuid, suspect_uuid, service, model, description, prompt, timestamp "
            "FROM descriptions WHERE suspect_uuid = ?"
        )
        rows = self._query(sql + " AND model = ? ORDER BY rowid", (suspect_uuid, model))
        if not rows and not strict:
            rows = self._query(sql + " ORDER BY rowid", (suspect_uuid,))
        return [_description(row) for row in rows]

    # Services and models

    def save_service(self, service: Service) -> None:
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT OR REPLACE INTO services (name, api_style, type, url, token, active)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    service.name,
                    service.api_style,
                    service.type,
                    service.url,
                    service.token,
                    int(service.active),
                ),
            )

    def get_service(self, name: str) -> Service:
        row = self._query_one(
            "SELECT name, api_style, type, url, token, active FROM services WHERE name = ?",
            (name,),
        )
        if row is None:
            raise NotFound(f"service {name} does not exist")
        return _service(row)

    def service_for_model(self, model_name: str) -> Service:
        return self.get_service(self.get_model(model_name).service)

    def save_model(self, model: AIModel) -> None:
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO models (name, service, visual, allowed, historical, price, weight)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(name) DO UPDATE SET
                    service = excluded.service,
                    visual = excluded.visual,
                    allowed = excluded.allowed,
                    historical = excluded.historical,
                    price = excluded.price,
                    weight = excluded.weight
                """,
                (
                    model.name,
                    model.service,
                    int(model.visual),
                    int(model.allowed),
                    int(model.historical),
                    model.price,
                    model.weight,
                ),
            )

    def get_model(self, name: str) -> AIModel:
        row = self._query_one(
            "SELECT name, service, visual, allowed, historical, price, weight "
            "FROM models WHERE name = ?",
            (name,),
        )
        if row is None:
            raise NotFound(f"model {name} does not exist")
        return _model(row)

    def list_models(
        self, allowed_only: bool = False, order_by: ModelOrder = ModelOrder.ID
    ) -> list[AIModel]:
        where = "WHERE allowed = 1" if allowed_only else ""
        order = _MODEL_ORDER[ModelOrder(order_by)]
        rows = self._query(
            "SELECT name, service, visual, allowed, historical, price, weight "
            f"FROM models {where} ORDER BY {order}"
        )
        return [_model(row) for row in rows]

    # Games

    def save_game(self, game: Game) -> None:
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO games (uuid, timestamp, score, investigator, player_uuid, model)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    game.uuid,
                    game.timestamp,
                    game.score,
                    game.investigator.name,
                    game.investigator.uuid,
                    game.model,
                ),
            )

    def latest_game(self, player_uuid: str) -> Game | None:
        row = self._query_one(
            "SELECT uuid, timestamp, score, investigator, player_uuid, model FROM games "
            "WHERE player_uuid = ? ORDER BY timestamp DESC, rowid DESC LIMIT 1",
            (player_uuid,),
        )
        return _game(row) if row is not None else None

    def get_game(self, game_uuid: str) -> Game:
        row = self._query_one(
            "SELECT uuid, timestamp, score, investigator, player_uuid, model "
            "FROM games WHERE uuid = ?",
            (game_uuid,),
        )
        if row is None:
            raise NotFound(f"game {game_uuid} does not exist")
        return _game(row)

    def get_score(self, game_uuid: str) -> int:
        return self.get_game(game_uuid).score

    def add_score(self, game_uuid: str, amount: int) -> None:
        with self.transaction() as cur:
            cur.execute("UPDATE games SET score = score + ? WHERE uuid = ?", (amount, game_uuid))
            if cur.rowcount == 0:
                raise NotFound(f"game {game_uuid} does not exist")

    def set_investigator(self, game_uuid: str, name: str) -> None:
        with self.transaction() as cur:
            cur.execute("UPDATE games SET investigator = ? WHERE uuid = ?", (name, game_uuid))
            if cur.rowcount == 0:
                raise NotFound(f"game {game_uuid} does not exist")

    def scores(self) -> list[sqlite3.Row]:
        return self._query(
            "SELECT uuid, score, investigator, timestamp FROM games "
            "ORDER BY score DESC, timestamp ASC"
        )

    def count_investigations(self, game_uuid: str) -> int:
        row = self._query_one(
            "SELECT COUNT(*) AS total FROM investigations WHERE game_uuid = ?", (game_uuid,)
        )
        return int(row["total"])

    # Investigations

    def save_investigation(self, investigation: Investigation) -> None:
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT OR REPLACE INTO investigations (uuid, game_uuid, timestamp, criminal_uuid)
                VALUES (?, ?, ?, ?)
                """,
                (
                    investigation.uuid,
                    investigation.game_uuid,
                    investigation.timestamp,
                    investigation.criminal_uuid,
                ),
            )
            cur.execute(
                "DELETE FROM investigation_suspects WHERE investigation_uuid = ?",
                (investigation.uuid,),
            )
            cur.executemany(
                """
                INSERT INTO investigation_suspects (investigation_uuid, position, suspect_uuid)
                VALUES (?, ?, ?)
                """,
                [
                    (investigation.uuid, position, suspect.uuid)
                    for position, suspect in enumerate(investigation.suspects)
                ],
            )

    def latest_investigation(self, game_uuid: str) -> Investigation:
        row = self._query_one(
            "SELECT uuid, game_uuid, timestamp, criminal_uuid FROM investigations "
            "WHERE game_uuid = ? ORDER BY timestamp DESC, rowid DESC LIMIT 1",
            (game_uuid,),
        )
        if row is None:
            raise NotFound(f"game {game_uuid} has no investigation")
        return self._load_investigation(row)

    def get_investigation(self, investigation_uuid: str) -> Investigation:
        row = self._query_one(
            "SELECT uuid, game_uuid, timestamp, criminal_uuid FROM investigations WHERE uuid = ?",
            (investigation_uuid,),
        )
        if row is None:
            raise NotFound(f"investigation {investigation_uuid} does not exist")
        return self._load_investigation(row)

    def _load_investigation(self, row: sqlite3.Row) -> Investigation:
        suspects = self._query(
            """
            SELECT s.uuid, s.image, s.timestamp
            FROM investigation_suspects AS slot
            JOIN suspects AS s ON s.uuid = slot.suspect_uuid
            WHERE slot.investigation_uuid = ?
            ORDER BY slot.position
            """,
            (row["uuid"],),
        )
        return Investigation(
            uuid=row["uuid"],
            game_uuid=row["game_uuid"],
            timestamp=row["timestamp"],
            criminal_uuid=row["criminal_uuid"],
            suspects=[_suspect(entry) for entry in suspects],
            rounds=self.rounds_for_investigation(row["uuid"]),
        )

    # Rounds

    def save_round(self, round_: Round) -> None:
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT OR REPLACE INTO rounds (uuid, investigation_uuid, question_uuid, answer, timestamp)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    round_.uuid,
                    round_.investigation_uuid,
                    round_.question.uuid,
                    round_.answer,
                    round_.timestamp,
                ),
            )

    def get_round(self, round_uuid: str) -> Round:
        rows = self._round_rows("r.uuid = ?", (round_uuid,))
        if not rows:
            raise NotFound(f"round {round_uuid} does not exist")
        return self._round(rows[0])

    def rounds_for_investigation(self, investigation_uuid: str) -> list[Round]:
        rows = self._round_rows("r.investigation_uuid = ?", (investigation_uuid,))
        return [self._round(row) for row in rows]

    def _round_rows(self, where: str, params: tuple) -> list[sqlite3.Row]:
        return self._query(
            """
            SELECT r.uuid, r.investigation_uuid, r.answer, r.timestamp,
                   q.uuid AS q_uuid, q.english, q.czech, q.polish, q.topic, q.level
            FROM rounds AS r
            JOIN questions AS q ON q.uuid = r.question_uuid
            WHERE """
            + where
            + " ORDER BY r.timestamp ASC, r.rowid ASC",
            params,
        )

    def _round(self, row: sqlite3.Row) -> Round:
        return Round(
            uuid=row["uuid"],
            investigation_uuid=row["investigation_uuid"],
            answer=row["answer"] or "",
            timestamp=row["timestamp"],
            question=Question(
                uuid=row["q_uuid"],
                english=row["english"],
                czech=row["czech"] or "",
                polish=row["polish"] or "",
                topic=row["topic"] or "",
                level=int(row["level"] or 0),
            ),
            eliminations=self.eliminations_for_round(row["uuid"]),
        )

    def get_answer(self, round_uuid: str) -> str:
        row = self._query_one("SELECT answer FROM rounds WHERE uuid = ?", (round_uuid,))
        if row is None:
            raise NotFound(f"round {round_uuid} does not exist")
        return row["answer"] or ""

    def set_answer_if_empty(self, round_uuid: str, answer: str) -> tuple[bool, str]:
        """Write the answer only if none is stored; returns (written, stored answer)."""
        with self.transaction() as cur:
            cur.execute(
                "UPDATE rounds SET answer = ? WHERE uuid = ? AND (answer IS NULL OR answer = '')",
                (answer, round_uuid),
            )
            written = cur.rowcount > 0
            cur.execute("SELECT answer FROM rounds WHERE uuid = ?", (round_uuid,))
            row = cur.fetchone()
        if row is None:
            raise NotFound(f"round {round_uuid} does not exist")
        return written, row["answer"]

    # Eliminations

    def save_elimination(self, elimination: Elimination, investigation_uuid: str) -> None:
        try:
            with self.transaction() as cur:
                cur.execute(
                    """
                    INSERT INTO eliminations (uuid, round_uuid, investigation_uuid, suspect_uuid, timestamp)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        elimination.uuid,
                        elimination.round_uuid,
                        investigation_uuid,
                        elimination.suspect_uuid,
                        elimination.timestamp,
                    ),
                )
        except sqlite3.IntegrityError as exc:
            raise Conflict(
                f"suspect {elimination.suspect_uuid} already eliminated in {investigation_uuid}"
            ) from exc

    def eliminations_for_round(self, round_uuid: str) -> list[Elimination]:
        rows = self._query(
            "SELECT uuid, round_uuid, suspect_uuid, timestamp FROM eliminations "
            "WHERE round_uuid = ? ORDER BY timestamp DESC, rowid DESC",
            (round_uuid,),
        )
        return [Elimination(**dict(row)) for row in rows]

    def count_eliminations(self, round_uuid: str) -> int:
        row = self._query_one(
            "SELECT COUNT(*) AS total FROM eliminations WHERE round_uuid = ?", (round_uuid,)
        )
        return int(row["total"])

    def _ensure_schema(self) -> None:
        with self.transaction() as cur:
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS suspects (
                    uuid TEXT PRIMARY KEY,
                    image TEXT NOT NULL UNIQUE,
                    timestamp TEXT NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS questions (
                    uuid TEXT PRIMARY KEY,
                    english TEXT NOT NULL UNIQUE,
                    czech TEXT,
                    polish TEXT,
                    topic TEXT,
                    level INTEGER
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS descriptions (
                    uuid TEXT PRIMARY KEY,
                    suspect_uuid TEXT NOT NULL REFERENCES suspects(uuid),
                    service TEXT,
                    model TEXT,
                    description TEXT NOT NULL,
                    prompt TEXT,
                    timestamp TEXT NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS services (
                    name TEXT PRIMARY KEY,
                    api_style TEXT,
                    type TEXT NOT NULL,
                    url TEXT,
                    token TEXT,
                    active INTEGER NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS models (
                    name TEXT PRIMARY KEY,
                    service TEXT NOT NULL,
                    visual INTEGER NOT NULL,
                    allowed INTEGER NOT NULL,
                    historical INTEGER NOT NULL,
                    price REAL NOT NULL DEFAULT 0,
                    weight REAL NOT NULL DEFAULT 0
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS games (
                    uuid TEXT PRIMARY KEY,
                    timestamp TEXT NOT NULL,
                    score INTEGER NOT NULL DEFAULT 0,
                    investigator TEXT,
                    player_uuid TEXT,
                    model TEXT
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS investigations (
                    uuid TEXT PRIMARY KEY,
                    game_uuid TEXT NOT NULL REFERENCES games(uuid),
                    timestamp TEXT NOT NULL,
                    criminal_uuid TEXT NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS investigation_suspects (
                    investigation_uuid TEXT NOT NULL REFERENCES investigations(uuid),
                    position INTEGER NOT NULL,
                    suspect_uuid TEXT NOT NULL REFERENCES suspects(uuid),
                    PRIMARY KEY (investigation_uuid, position)
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS rounds (
                    uuid TEXT PRIMARY KEY,
                    investigation_uuid TEXT NOT NULL,
                    question_uuid TEXT NOT NULL REFERENCES questions(uuid),
                    answer TEXT NOT NULL DEFAULT '',
                    timestamp TEXT NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS eliminations (
                    uuid TEXT PRIMARY KEY,
                    round_uuid TEXT NOT NULL REFERENCES rounds(uuid),
                    investigation_uuid TEXT NOT NULL,
                    suspect_uuid TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    UNIQUE (investigation_uuid, suspect_uuid)
                )
                """
            )
            cur.execute("CREATE INDEX IF NOT EXISTS idx_games_player ON games (player_uuid)")
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_investigations_game ON investigations (game_uuid)"
            )
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_rounds_investigation ON rounds (investigation_uuid)"
            )
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_eliminations_round ON eliminations (round_uuid)"
            )
        logger.debug("Schema ready at %s", self.path)


def _suspect(row: sqlite3.Row) -> Suspect:
    return Suspect(uuid=row["uuid"], image=row["image"], timestamp=row["timestamp"])


def _description(row: sqlite3.Row) -> Description:
    return Description(
        uuid=row["uuid"],
        suspect_uuid=row["suspect_uuid"],
        service=row["service"] or "",
        model=row["model"] or "",
        description=row["description"],
        prompt=row["prompt"] or "",
        timestamp=row["timestamp"],
    )


def _question(row: sqlite3.Row) -> Question:
    return Question(
        uuid=row["uuid"],
        english=row["english"],
        czech=row["czech"] or "",
        polish=row["polish"] or "",
        topic=row["topic"] or "",
        level=int(row["level"] or 0),
    )


def _service(row: sqlite3.Row) -> Service:
    return Service(
        name=row["name"],
        api_style=row["api_style"],
        type=row["type"],
        url=row["url"],
        token=row["token"] or "",
        active=bool(row["active"]),
    )


def _model(row: sqlite3.Row) -> AIModel:
    return AIModel(
        name=row["name"],
        service=row["service"],
        visual=bool(row["visual"]),
        allowed=bool(row["allowed"]),
        historical=bool(row["historical"]),
        price=float(row["price"]),
        weight=float(row["weight"]),
    )


def _game(row: sqlite3.Row) -> Game:
    return Game(
        uuid=row["uuid"],
        timestamp=row["timestamp"],
        score=int(row["score"] or 0),
        model=row["model"] or "",
        investigator=Player(uuid=row["player_uuid"] or "", name=row["investigator"] or ""),
    )
