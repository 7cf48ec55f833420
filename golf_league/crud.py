from datetime import date

from sqlalchemy.orm import Session

from . import models, schemas
from .golf_calc import HOLES_PER_ROUND, InvalidInputError, compute_round
from .months import month_bounds


#---------------------------------------------------------------------------------
# -------------------------------- Organizations ---------------------------------
# --------------------------------------------------------------------------------

def get_organizations(db: Session):
    return db.query(models.Organization).order_by(models.Organization.name).all()

def get_organization_by_slug(db: Session, slug: str):
    return db.query(models.Organization).filter(models.Organization.slug == slug).first()

def create_organization(db: Session, data: schemas.OrganizationCreate):
    org = models.Organization(**data.model_dump())
    org.season_settings = models.SeasonSettings(group_name=data.name)
    db.add(org)
    db.commit()
    db.refresh(org)
    return org


def get_season_settings(db: Session, organization: models.Organization):
    # se crean con valores por defecto la primera vez
    settings = (
        db.query(models.SeasonSettings)
        .filter(models.SeasonSettings.organization_id == organization.id)
        .first()
    )
    if settings is None:
        settings = models.SeasonSettings(organization_id=organization.id, group_name=organization.name)
        db.add(settings)
        db.commit()
        db.refresh(settings)
    return settings

def update_season_settings(db: Session, organization: models.Organization, data: schemas.SeasonSettingsUpdate):
    settings = get_season_settings(db, organization)
    for k, v in data.model_dump(exclude_unset=True).items():
        setattr(settings, k, v)
    db.commit()
    db.refresh(settings)
    return settings


#---------------------------------------------------------------------------------
# ---------------------------------- Players -------------------------------------
# --------------------------------------------------------------------------------

def get_players(db: Session, organization_id: int):
    return (
        db.query(models.Player)
        .filter(models.Player.organization_id == organization_id)
        .order_by(models.Player.name)
        .all()
    )

def get_player(db: Session, organization_id: int, player_id: int):
    return (
        db.query(models.Player)
        .filter(models.Player.organization_id == organization_id, models.Player.id == player_id)
        .first()
    )

def find_player_by_name(db: Session, organization_id: int, name: str):
    # coincidencia parcial sin mayusculas, en los dos sentidos
    needle = name.strip().lower()
    for p in get_players(db, organization_id):
        candidate = p.name.lower()
        if needle in candidate or candidate in needle:
            return p
    return None

def create_player(db: Session, organization_id: int, data: schemas.PlayerCreate):
    p = models.Player(organization_id=organization_id, **data.model_dump())
    db.add(p)
    db.commit()
    db.refresh(p)
    return p

def update_player(db: Session, organization_id: int, player_id: int, data: schemas.PlayerUpdate):
    p = get_player(db, organization_id, player_id)
    if not p:
        return None
    for k, v in data.model_dump(exclude_unset=True).items():
        setattr(p, k, v)
    db.commit()
    db.refresh(p)
    return p

def delete_player(db: Session, organization_id: int, player_id: int):
    p = get_player(db, organization_id, player_id)
    if not p:
        return False

    # historico de clasificaciones y ganadores que apuntan al jugador
    db.query(models.MonthlyLeaderboard).filter(models.MonthlyLeaderboard.player_id == player_id).delete()
    db.query(models.MonthlyWinner).filter(models.MonthlyWinner.winner_id == player_id).delete()
    db.query(models.MonthlyWinner).filter(models.MonthlyWinner.runner_up_id == player_id).update(
        {"runner_up_id": None}
    )

    db.delete(p)
    db.commit()
    return True


#---------------------------------------------------------------------------------
# ------------------------------------ Course ------------------------------------
# --------------------------------------------------------------------------------

def get_courses(db: Session, organization_id: int):
    return (
        db.query(models.Course)
        .filter(models.Course.organization_id == organization_id)
        .order_by(models.Course.name)
        .all()
    )

def get_course(db: Session, organization_id: int, course_id: int):
    return (
        db.query(models.Course)
        .filter(models.Course.organization_id == organization_id, models.Course.id == course_id)
        .first()
    )

def get_course_by_name(db: Session, organization_id: int, name: str):
    return (
        db.query(models.Course)
        .filter(models.Course.organization_id == organization_id, models.Course.name == name)
        .first()
    )

def create_course(db: Session, organization_id: int, data: schemas.CourseCreate):
    c = models.Course(organization_id=organization_id, **data.model_dump())
    db.add(c)
    db.commit()
    db.refresh(c)
    return c

def update_course(db: Session, organization_id: int, course_id: int, data: schemas.CourseUpdate):
    c = get_course(db, organization_id, course_id)
    if not c:
        return None

    changes = data.model_dump(exclude_unset=True)

    # con los 18 hoyos cargados el par total sale de ellos
    holes = get_holes_for_course(db, c.id)
    if "par_total" in changes and len(holes) == HOLES_PER_ROUND:
        hole_par_total = sum(h.par for h in holes)
        if changes["par_total"] != hole_par_total:
            raise InvalidInputError(
                f"par_total {changes['par_total']} does not match the holes' total par {hole_par_total}",
                kind="par_mismatch",
            )

    for k, v in changes.items():
        setattr(c, k, v)
    db.commit()
    db.refresh(c)
    return c

def delete_course(db: Session, organization_id: int, course_id: int):
    c = get_course(db, organization_id, course_id)
    if not c:
        return False
    db.delete(c)
    db.commit()
    return True


#---------------------------------------------------------------------------------
# ------------------------------------- Holes ------------------------------------
# --------------------------------------------------------------------------------

def get_holes_for_course(db: Session, course_id: int):
    return (
        db.query(models.Hole)
        .filter(models.Hole.course_id == course_id)
        .order_by(models.Hole.number)
        .all()
    )

def upsert_holes_for_course(db: Session, course: models.Course, holes_data):
    # borramos y reinsertamos los 18 hoyos; el par total sale de los hoyos
    db.query(models.Hole).filter(models.Hole.course_id == course.id).delete()

    for h in holes_data:
        db.add(models.Hole(course_id=course.id, **h.model_dump()))

    course.par_total = sum(h.par for h in holes_data)
    db.commit()
    db.refresh(course)
    return get_holes_for_course(db, course.id)

def hole_pars(db: Session, course: models.Course) -> list[int]:
    holes = get_holes_for_course(db, course.id)
    if len(holes) != HOLES_PER_ROUND:
        raise InvalidInputError(
            f"Course '{course.name}' must have {HOLES_PER_ROUND} holes configured",
            kind="incomplete_course",
        )
    return [h.par for h in holes]


#---------------------------------------------------------------------------------
# ------------------------------------- Rounds ------------------------------------
# --------------------------------------------------------------------------------

def _apply_result(r: models.Round, result):
    r.raw_scores = list(result.raw_scores)
    r.capped_scores = list(result.capped_scores)
    r.gross_capped = result.gross_capped
    r.net = result.net
    r.over_par = result.over_par


def create_round(
    db: Session,
    player: models.Player,
    course: models.Course,
    played_on: date,
    raw_scores,
    course_handicap: int,
    source: str = "app",
    status: str = "ok",
    commit: bool = True,
):
    result = compute_round(raw_scores, hole_pars(db, course), course_handicap, course.par_total)

    r = models.Round(
        player_id=player.id,
        course_id=course.id,
        played_on=played_on,
        course_handicap=course_handicap,
        source=source,
        status=status,
    )
    _apply_result(r, result)
    db.add(r)

    if commit:
        db.commit()
        db.refresh(r)
    return r


def update_round_scores(db: Session, r: models.Round, raw_scores):
    # se recalcula todo, nunca se parchea
    result = compute_round(raw_scores, hole_pars(db, r.course), r.course_handicap, r.course.par_total)
    _apply_result(r, result)
    db.commit()
    db.refresh(r)
    return r


def get_round(db: Session, organization_id: int, round_id: int):
    return (
        db.query(models.Round)
        .join(models.Player)
        .filter(models.Player.organization_id == organization_id, models.Round.id == round_id)
        .first()
    )


def get_rounds(db: Session, organization_id: int, month: str | None = None, player_id: int | None = None):
    q = (
        db.query(models.Round)
        .join(models.Player)
        .filter(models.Player.organization_id == organization_id)
    )
    if player_id is not None:
        q = q.filter(models.Round.player_id == player_id)
    if month:
        start, end = month_bounds(month)
        q = q.filter(models.Round.played_on >= start, models.Round.played_on < end)

    return q.order_by(models.Round.played_on.desc(), models.Round.id.desc()).all()


def rounds_for_player_in_month(db: Session, player_id: int, month: str):
    start, end = month_bounds(month)
    return (
        db.query(models.Round)
        .filter(
            models.Round.player_id == player_id,
            models.Round.played_on >= start,
            models.Round.played_on < end,
        )
        .order_by(models.Round.played_on.asc())
        .all()
    )


def delete_round(db: Session, r: models.Round):
    db.delete(r)
    db.commit()


#---------------------------------------------------------------------------------
# ------------------------------- Handicap snapshots ------------------------------
# --------------------------------------------------------------------------------

def get_snapshot(db: Session, player_id: int, month: str):
    return (
        db.query(models.HandicapSnapshot)
        .filter(models.HandicapSnapshot.player_id == player_id, models.HandicapSnapshot.month == month)
        .first()
    )


def get_snapshots(db: Session, organization_id: int, month: str | None = None):
    q = (
        db.query(models.HandicapSnapshot)
        .join(models.Player)
        .filter(models.Player.organization_id == organization_id)
    )
    if month:
        q = q.filter(models.HandicapSnapshot.month == month)
    return q.order_by(
        models.HandicapSnapshot.month.desc(),
        models.Player.name.asc(),
    ).all()
