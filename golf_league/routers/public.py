# golf_league/routers/public.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from golf_league import crud, handicaps, importer, leaderboard, models, schemas
from golf_league.db import get_db
from golf_league.deps import get_organization
from golf_league.schemas import MONTH_PATTERN

router = APIRouter(prefix="/api/orgs/{slug}", tags=["public"])


# ---------------------------------------------------------------------------------
# ---------------------------------- Jugadores ------------------------------------
# ---------------------------------------------------------------------------------

@router.get("/players", response_model=List[schemas.PlayerOut])
def players_list(org: models.Organization = Depends(get_organization), db: Session = Depends(get_db)):
    return crud.get_players(db, org.id)


@router.get("/players/{player_id}", response_model=schemas.PlayerOut)
def player_detail(player_id: int, org: models.Organization = Depends(get_organization), db: Session = Depends(get_db)):
    p = crud.get_player(db, org.id, player_id)
    if not p:
        raise HTTPException(status_code=404, detail="Player not found")
    return p


@router.get("/players/{player_id}/stats")
def player_stats(
    player_id: int,
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    org: models.Organization = Depends(get_organization),
    db: Session = Depends(get_db),
):
    p = crud.get_player(db, org.id, player_id)
    if not p:
        raise HTTPException(status_code=404, detail="Player not found")
    return leaderboard.player_stats(db, p, month=month)


# ---------------------------------------------------------------------------------
# ----------------------------------- Campos --------------------------------------
# ---------------------------------------------------------------------------------

@router.get("/courses", response_model=List[schemas.CourseOut])
def courses_list(org: models.Organization = Depends(get_organization), db: Session = Depends(get_db)):
    return crud.get_courses(db, org.id)


@router.get("/courses/{course_id}", response_model=schemas.CourseOut)
def course_detail(course_id: int, org: models.Organization = Depends(get_organization), db: Session = Depends(get_db)):
    c = crud.get_course(db, org.id, course_id)
    if not c:
        raise HTTPException(status_code=404, detail="Course not found")
    return c


@router.get("/courses/{course_id}/holes", response_model=List[schemas.HoleOut])
def course_holes(course_id: int, org: models.Organization = Depends(get_organization), db: Session = Depends(get_db)):
    c = crud.get_course(db, org.id, course_id)
    if not c:
        raise HTTPException(status_code=404, detail="Course not found")
    return crud.get_holes_for_course(db, c.id)


# ---------------------------------------------------------------------------------
# ----------------------------------- Vueltas -------------------------------------
# ---------------------------------------------------------------------------------

@router.get("/rounds", response_model=List[schemas.RoundView])
def rounds_list(
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    player_id: Optional[int] = None,
    org: models.Organization = Depends(get_organization),
    db: Session = Depends(get_db),
):
    rounds = crud.get_rounds(db, org.id, month=month, player_id=player_id)
    return [leaderboard.round_view(r) for r in rounds]


# ---------------------------------------------------------------------------------
# -------------------------------- Clasificaciones --------------------------------
# ---------------------------------------------------------------------------------

@router.get("/leaderboard")
def leaderboard_current(
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    org: models.Organization = Depends(get_organization),
    db: Session = Depends(get_db),
):
    return leaderboard.build_leaderboard(db, org, month=month)


@router.get("/leaderboard/history")
def leaderboard_history(org: models.Organization = Depends(get_organization), db: Session = Depends(get_db)):
    return leaderboard.leaderboard_history(db, org)


@router.get("/leaderboard/{month}")
def leaderboard_month_snapshot(
    month: str,
    org: models.Organization = Depends(get_organization),
    db: Session = Depends(get_db),
):
    rows = leaderboard.monthly_snapshot(db, org, month)
    return [
        {
            "player_id": r.player_id,
            "player_name": r.player_name,
            "rank": r.rank,
            "rounds_count": r.rounds_count,
            "avg_net": r.avg_net,
            "avg_over_par": r.avg_over_par,
            "avg_dth": r.avg_dth,
            "avg_gross_capped": r.avg_gross_capped,
            "current_handicap": r.current_handicap,
            "last_round_date": r.last_round_date,
        }
        for r in rows
    ]


@router.get("/winners")
def winners_list(org: models.Organization = Depends(get_organization), db: Session = Depends(get_db)):
    return [
        {
            "month": w.month,
            "winner_id": w.winner_id,
            "winner_name": w.winner_name,
            "winner_score": w.winner_score,
            "runner_up_id": w.runner_up_id,
            "runner_up_name": w.runner_up_name,
            "runner_up_score": w.runner_up_score,
            "announced_at": w.announced_at,
        }
        for w in leaderboard.get_winners(db, org)
    ]


# ---------------------------------------------------------------------------------
# ---------------------------------- Handicaps ------------------------------------
# ---------------------------------------------------------------------------------

@router.get("/handicaps/snapshots", response_model=List[schemas.SnapshotOut])
def handicap_snapshots(org: models.Organization = Depends(get_organization), db: Session = Depends(get_db)):
    return [handicaps.snapshot_dict(s) for s in crud.get_snapshots(db, org.id)]


@router.get("/handicaps/summary/{month}")
def handicap_summary(month: str, org: models.Organization = Depends(get_organization), db: Session = Depends(get_db)):
    try:
        return handicaps.monthly_update_summary(db, org, month)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


# ---------------------------------------------------------------------------------

@router.get("/settings", response_model=schemas.SeasonSettingsOut)
def season_settings(org: models.Organization = Depends(get_organization), db: Session = Depends(get_db)):
    return crud.get_season_settings(db, org)


@router.get("/import/sample-csv", response_class=PlainTextResponse)
def import_sample_csv():
    return PlainTextResponse(
        importer.sample_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="sample-rounds.csv"'},
    )
