"""
Importacion de vueltas historicas desde CSV.

Formato (una vuelta por fila, sin tarjeta hoyo a hoyo):

    player_name,course_name,played_on,gross_score,course_handicap
"""
import csv
import io
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.orm import Session

from . import crud, models, schemas
from .golf_calc import HOLES_PER_ROUND, InvalidInputError, cap_hole

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("player_name", "course_name", "played_on", "gross_score", "course_handicap")
INT_COLUMNS = ("gross_score", "course_handicap")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MIN_GROSS, MAX_GROSS = 50, 150
MIN_COURSE_HCP, MAX_COURSE_HCP = 0, 54

# campo creado al vuelo: par 72, todos los hoyos par 4
DEFAULT_HOLE_PAR = 4
DEFAULT_HOLE_DISTANCE = 400


class ImportFormatError(ValueError):
    pass


@dataclass
class ImportResult:
    imported: int = 0
    skipped: int = 0
    errors: list = field(default_factory=list)
    players_created: int = 0
    courses_created: int = 0

    @property
    def success(self):
        return not self.errors

    def add_error(self, row_number: int, message: str):
        self.errors.append(f"Row {row_number}: {message}")
        self.skipped += 1

    def to_dict(self):
        return {
            "success": self.success,
            "imported": self.imported,
            "skipped": self.skipped,
            "errors": self.errors,
            "summary": {
                "players_created": self.players_created,
                "courses_created": self.courses_created,
                "rounds_imported": self.imported,
            },
        }


def parse_csv(text: str) -> list[dict]:
    lines = [line for line in (text or "").strip().splitlines() if line.strip()]
    if len(lines) < 2:
        raise ImportFormatError("CSV must have header row and at least one data row")

    rows = []
    for raw in csv.DictReader(io.StringIO("\n".join(lines)), skipinitialspace=True):
        row = {}
        for k, v in raw.items():
            if k is None:
                continue  # columnas de mas
            key = k.strip()
            value = (v or "").strip()
            if key in INT_COLUMNS:
                try:
                    row[key] = int(value)
                except ValueError:
                    row[key] = None
            else:
                row[key] = value
        rows.append(row)
    return rows


def spread_gross(gross: int, pars: list[int]) -> list[int]:
    """
    Reparte el gross en 18 hoyos: gross // 18 en cada hoyo y los golpes
    sobrantes a los hoyos de par mas alto primero.
    """
    base = gross // HOLES_PER_ROUND
    extra = gross % HOLES_PER_ROUND

    scores = [base] * HOLES_PER_ROUND
    ordered = sorted(range(HOLES_PER_ROUND), key=lambda i: (-pars[i], i))
    for i in ordered[:extra]:
        scores[i] += 1
    return scores


def _validate_row(row: dict) -> str | None:
    if any(row.get(col) in (None, "") for col in REQUIRED_COLUMNS):
        return "Missing required fields (" + ", ".join(REQUIRED_COLUMNS) + ")"
    if not DATE_RE.match(row["played_on"]):
        return "Invalid date format. Use YYYY-MM-DD"
    try:
        datetime.strptime(row["played_on"], "%Y-%m-%d")
    except ValueError:
        return "Invalid date format. Use YYYY-MM-DD"
    if not MIN_GROSS <= row["gross_score"] <= MAX_GROSS:
        return f"Invalid gross score. Must be between {MIN_GROSS} and {MAX_GROSS}"
    if not MIN_COURSE_HCP <= row["course_handicap"] <= MAX_COURSE_HCP:
        return f"Invalid course handicap. Must be between {MIN_COURSE_HCP} and {MAX_COURSE_HCP}"
    return None


def _create_default_course(db: Session, organization: models.Organization, name: str):
    course = crud.create_course(
        db,
        organization.id,
        schemas.CourseCreate(name=name, tees="Blue", par_total=DEFAULT_HOLE_PAR * HOLES_PER_ROUND),
    )
    holes = [
        schemas.HoleCreate(number=n, par=DEFAULT_HOLE_PAR, distance=DEFAULT_HOLE_DISTANCE)
        for n in range(1, HOLES_PER_ROUND + 1)
    ]
    crud.upsert_holes_for_course(db, course, holes)
    return course


def import_rounds(
    db: Session,
    organization: models.Organization,
    rows: list[dict],
    auto_create_players: bool = False,
    auto_create_courses: bool = False,
) -> ImportResult:
    result = ImportResult()

    for row_number, row in enumerate(rows, start=1):
        error = _validate_row(row)
        if error:
            result.add_error(row_number, error)
            continue

        player = crud.find_player_by_name(db, organization.id, row["player_name"])
        if player is None:
            if not auto_create_players:
                result.add_error(row_number, f"Player '{row['player_name']}' not found")
                continue
            player = crud.create_player(
                db,
                organization.id,
                schemas.PlayerCreate(name=row["player_name"], current_handicap=row["course_handicap"]),
            )
            result.players_created += 1

        course = crud.get_course_by_name(db, organization.id, row["course_name"])
        if course is None:
            if not auto_create_courses:
                result.add_error(row_number, f"Course '{row['course_name']}' not found")
                continue
            course = _create_default_course(db, organization, row["course_name"])
            result.courses_created += 1

        try:
            pars = crud.hole_pars(db, course)
        except InvalidInputError:
            result.add_error(row_number, f"Course '{course.name}' does not have 18 holes configured")
            continue

        raw_scores = spread_gross(row["gross_score"], pars)
        # si el capeo cambia el gross importado, la vuelta queda para revisar
        capped_total = sum(cap_hole(s, p) for s, p in zip(raw_scores, pars))
        status = "ok" if capped_total == row["gross_score"] else "needs_review"

        crud.create_round(
            db,
            player,
            course,
            datetime.strptime(row["played_on"], "%Y-%m-%d").date(),
            raw_scores,
            row["course_handicap"],
            source="import",
            status=status,
        )
        result.imported += 1

    logger.info(
        "CSV import for %s: %d imported, %d skipped", organization.slug, result.imported, result.skipped
    )
    return result


def sample_csv() -> str:
    return (
        "player_name,course_name,played_on,gross_score,course_handicap\n"
        "Ashok Hiremath,Willingdon Golf Club,2024-12-28,85,16\n"
        "Dev Bhattacharya,BPGC,2024-12-26,78,13\n"
        "Debashish Das,US Club,2024-12-30,92,14\n"
    )
