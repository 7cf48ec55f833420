from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"

# Limites de entrada (el nucleo de calculo no valida rangos, solo la longitud)
MIN_HOLE_SCORE = 1
MAX_HOLE_SCORE = 10


def _check_scores(scores):
    if any(s < MIN_HOLE_SCORE or s > MAX_HOLE_SCORE for s in scores):
        raise ValueError("all scores must be integers between 1 and 10")
    return scores


def _not_null(value):
    # null explicito en un PUT: las columnas son NOT NULL
    if value is None:
        raise ValueError("may not be null")
    return value


class OrganizationCreate(BaseModel):
    name: str
    slug: str = Field(pattern=r"^[a-z0-9-]+$")
    is_parent: bool = False


class OrganizationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    is_parent: bool


class PlayerCreate(BaseModel):
    name: str
    email: Optional[str] = None
    phone: str | None = None
    current_handicap: int = Field(default=0, ge=0, le=54)
    is_admin: bool = False


class PlayerUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    current_handicap: Optional[int] = Field(default=None, ge=0, le=54)
    is_admin: Optional[bool] = None

    @field_validator("name", "current_handicap", "is_admin")
    @classmethod
    def not_null(cls, v):
        return _not_null(v)


class PlayerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    current_handicap: int
    is_admin: bool


class CourseCreate(BaseModel):
    name: str
    tees: Optional[str] = "Blue"
    par_total: int = Field(default=72, ge=54, le=90)
    rating: Optional[float] = Field(default=None, gt=0)
    slope: Optional[float] = Field(default=None, ge=55, le=155)


class CourseUpdate(BaseModel):
    name: Optional[str] = None
    tees: Optional[str] = None
    par_total: Optional[int] = Field(default=None, ge=54, le=90)
    rating: Optional[float] = Field(default=None, gt=0)
    slope: Optional[float] = Field(default=None, ge=55, le=155)  # null = sin slope

    @field_validator("name", "par_total")
    @classmethod
    def not_null(cls, v):
        return _not_null(v)


class CourseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    tees: Optional[str] = None
    par_total: int
    rating: Optional[float] = None
    slope: Optional[float] = None


class HoleCreate(BaseModel):
    number: int = Field(ge=1, le=18)
    par: int = Field(ge=3, le=5)
    distance: Optional[int] = None


class HoleOut(HoleCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int


class HolesReplace(BaseModel):
    holes: List[HoleCreate] = Field(min_length=18, max_length=18)

    @field_validator("holes")
    @classmethod
    def numbers_1_to_18(cls, holes):
        if sorted(h.number for h in holes) != list(range(1, 19)):
            raise ValueError("holes must be numbered 1..18 exactly once")
        return holes


class RoundCreate(BaseModel):
    player_id: int
    course_id: int
    played_on: date
    raw_scores: List[int] = Field(min_length=18, max_length=18)
    course_handicap: int = Field(ge=0, le=54)
    source: Literal["app", "admin", "import"] = "app"

    @field_validator("raw_scores")
    @classmethod
    def scores_in_range(cls, scores):
        return _check_scores(scores)


class RoundScoresUpdate(BaseModel):
    raw_scores: List[int] = Field(min_length=18, max_length=18)

    @field_validator("raw_scores")
    @classmethod
    def scores_in_range(cls, scores):
        return _check_scores(scores)


class RoundOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    player_id: int
    course_id: int
    played_on: date
    raw_scores: List[int]
    capped_scores: List[int]
    gross_capped: int
    course_handicap: int
    net: int
    over_par: int
    source: str
    status: str


class RoundView(RoundOut):
    player_name: Optional[str] = None
    course_name: Optional[str] = None
    course_slope: Optional[float] = None
    handicap_index: Optional[float] = None
    slope_adjusted_course_handicap: float
    slope_adjusted_dth: float
    normalized_over_par: float


class HandicapRecalcRequest(BaseModel):
    window: Literal["previous", "current", "specific"] = "previous"
    month: Optional[str] = Field(default=None, pattern=MONTH_PATTERN)


class SnapshotOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    player_id: int
    player_name: Optional[str] = None
    month: str
    prev_handicap: int
    rounds_count: int
    avg_monthly_over_par: Optional[float] = None
    delta: int
    new_handicap: int
    created_at: Optional[datetime] = None


class ImportRoundsRequest(BaseModel):
    csv_data: str
    auto_create_players: bool = False
    auto_create_courses: bool = False


class SeasonSettingsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    group_name: str
    season_end: Optional[date] = None
    leaderboard_metric: str
    k_factor: float
    change_cap: float


class SeasonSettingsUpdate(BaseModel):
    group_name: Optional[str] = None
    season_end: Optional[date] = None
    leaderboard_metric: Optional[Literal["avg_dth", "avg_over_par", "avg_net"]] = None
    k_factor: Optional[float] = Field(default=None, gt=0, lt=1)
    change_cap: Optional[float] = Field(default=None, ge=0, multiple_of=1)  # entero: el redondeo no supera el tope

    @field_validator("group_name", "leaderboard_metric", "k_factor", "change_cap")
    @classmethod
    def not_null(cls, v):
        return _not_null(v)
