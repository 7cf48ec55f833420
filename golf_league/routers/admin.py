# golf_league/routers/admin.py

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from golf_league import crud, handicaps, importer, leaderboard, models, schemas, seed
from golf_league.db import get_db
from golf_league.deps import get_organization, require_admin
from golf_league.golf_calc import InvalidInputError
from golf_league.months import current_month, parse_month

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/orgs/{slug}",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


#--------------------------------------------------------------------------------
#------------------------------ ADMIN: PLAYERS ----------------------------------
#--------------------------------------------------------------------------------

@router.post("/players", response_model=schemas.PlayerOut, status_code=201)
def player_create(
    data: schemas.PlayerCreate,
    org: models.Organization = Depends(get_organization),
    db: Session = Depends(get_db),
):
    return crud.create_player(db, org.id, data)


@router.put("/players/{player_id}", response_model=schemas.PlayerOut)
def player_update(
    player_id: int,
    data: schemas.PlayerUpdate,
    org: models.Organization = Depends(get_organization),
    db: Session = Depends(get_db),
):
    p = crud.update_player(db, org.id, player_id, data)
    if not p:
        raise HTTPException(status_code=404, detail="Player not found")
    return p


@router.delete("/players/{player_id}", status_code=204)
def player_delete(player_id: int, org: models.Organization = Depends(get_organization), db: Session = Depends(get_db)):
    if not crud.delete_player(db, org.id, player_id):
        raise HTTPException(status_code=404, detail="Player not found")
    return Response(status_code=204)


#--------------------------------------------------------------------------------
#------------------------------ ADMIN: COURSES ----------------------------------
#--------------------------------------------------------------------------------

@router.post("/courses", response_model=schemas.CourseOut, status_code=201)
def course_create(
    data: schemas.CourseCreate,
    org: models.Organization = Depends(get_organization),
    db: Session = Depends(get_db),
):
    return crud.create_course(db, org.id, data)


@router.put("/courses/{course_id}", response_model=schemas.CourseOut)
def course_update(
    course_id: int,
    data: schemas.CourseUpdate,
    org: models.Organization = Depends(get_organization),
    db: Session = Depends(get_db),
):
    try:
        c = crud.update_course(db, org.id, course_id, data)
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not c:
        raise HTTPException(status_code=404, detail="Course not found")
    return c


@router.delete("/courses/{course_id}", status_code=204)
def course_delete(course_id: int, org: models.Organization = Depends(get_organization), db: Session = Depends(get_db)):
    if not crud.delete_course(db, org.id, course_id):
        raise HTTPException(status_code=404, detail="Course not found")
    return Response(status_code=204)


@router.put("/courses/{course_id}/holes", response_model=list[schemas.HoleOut])
def course_holes_replace(
    course_id: int,
    data: schemas.HolesReplace,
    org: models.Organization = Depends(get_organization),
    db: Session = Depends(get_db),
):
    c = crud.get_course(db, org.id, course_id)
    if not c:
        raise HTTPException(status_code=404, detail="Course not found")
    return crud.upsert_holes_for_course(db, c, sorted(data.holes, key=lambda h: h.number))


#--------------------------------------------------------------------------------
#------------------------------ ADMIN: ROUNDS -----------------------------------
#--------------------------------------------------------------------------------

@router.post("/rounds", response_model=schemas.RoundView, status_code=201)
def round_create(
    data: schemas.RoundCreate,
    org: models.Organization = Depends(get_organization),
    db: Session = Depends(get_db),
):
    player = crud.get_player(db, org.id, data.player_id)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")
    course = crud.get_course(db, org.id, data.course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")

    try:
        r = crud.create_round(
            db,
            player,
            course,
            data.played_on,
            data.raw_scores,
            data.course_handicap,
            source=data.source,
        )
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return leaderboard.round_view(r)


@router.put("/rounds/{round_id}", response_model=schemas.RoundView)
def round_update_scores(
    round_id: int,
    data: schemas.RoundScoresUpdate,
    org: models.Organization = Depends(get_organization),
    db: Session = Depends(get_db),
):
    r = crud.get_round(db, org.id, round_id)
    if not r:
        raise HTTPException(status_code=404, detail="Round not found")

    try:
        r = crud.update_round_scores(db, r, data.raw_scores)
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return leaderboard.round_view(r)


@router.delete("/rounds/{round_id}")
def round_delete(round_id: int, org: models.Organization = Depends(get_organization), db: Session = Depends(get_db)):
    r = crud.get_round(db, org.id, round_id)
    if not r:
        raise HTTPException(status_code=404, detail="Round not found")
    crud.delete_round(db, r)
    return {"message": "Round deleted successfully"}


#--------------------------------------------------------------------------------
#------------------------------ ADMIN: HANDICAPS --------------------------------
#--------------------------------------------------------------------------------

@router.post("/handicaps/apply")
def handicaps_apply(
    data: schemas.HandicapRecalcRequest,
    org: models.Organization = Depends(get_organization),
    db: Session = Depends(get_db),
):
    if data.window == "specific":
        if not data.month:
            raise HTTPException(status_code=400, detail="month is required for window 'specific'")
        target_month = data.month
    elif data.window == "current":
        target_month = current_month()
    else:
        target_month = None  # mes anterior

    result = handicaps.run_monthly_recalculation(db, org, target_month)
    return result.to_dict()


@router.get("/handicaps/export", response_class=PlainTextResponse)
def handicaps_export(org: models.Organization = Depends(get_organization), db: Session = Depends(get_db)):
    content = handicaps.snapshots_csv(crud.get_snapshots(db, org.id))
    filename = f"handicap-snapshots-{current_month()}.csv"
    return PlainTextResponse(
        content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


#--------------------------------------------------------------------------------
#------------------------------ ADMIN: IMPORT -----------------------------------
#--------------------------------------------------------------------------------

@router.post("/import/rounds")
def import_rounds(
    data: schemas.ImportRoundsRequest,
    org: models.Organization = Depends(get_organization),
    db: Session = Depends(get_db),
):
    try:
        rows = importer.parse_csv(data.csv_data)
    except importer.ImportFormatError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    result = importer.import_rounds(
        db,
        org,
        rows,
        auto_create_players=data.auto_create_players,
        auto_create_courses=data.auto_create_courses,
    )
    return result.to_dict()


#--------------------------------------------------------------------------------
#-------------------------- ADMIN: LEADERBOARD / WINNERS ------------------------
#--------------------------------------------------------------------------------

def _valid_month(month: str) -> str:
    try:
        parse_month(month)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return month


@router.post("/leaderboard/{month}/finalize")
def leaderboard_finalize(month: str, org: models.Organization = Depends(get_organization), db: Session = Depends(get_db)):
    rows = leaderboard.finalize_month(db, org, _valid_month(month))
    return {"month": month, "players": len(rows)}


@router.post("/winners/{month}", status_code=201)
def winner_announce(month: str, org: models.Organization = Depends(get_organization), db: Session = Depends(get_db)):
    try:
        w = leaderboard.announce_winner(db, org, _valid_month(month))
    except leaderboard.WinnerAlreadyAnnounced as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except leaderboard.LeaderboardNotFinalized as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    logger.info("Winner for %s (%s): %s", org.slug, month, w.winner_name)
    return {
        "month": w.month,
        "winner_name": w.winner_name,
        "winner_score": w.winner_score,
        "runner_up_name": w.runner_up_name,
        "runner_up_score": w.runner_up_score,
    }


#--------------------------------------------------------------------------------

@router.put("/settings", response_model=schemas.SeasonSettingsOut)
def season_settings_update(
    data: schemas.SeasonSettingsUpdate,
    org: models.Organization = Depends(get_organization),
    db: Session = Depends(get_db),
):
    return crud.update_season_settings(db, org, data)


@router.post("/seed")
def seed_data(org: models.Organization = Depends(get_organization), db: Session = Depends(get_db)):
    created = seed.seed_organization(db, org)
    return {"message": "Seed data created successfully", "courses_created": [c.name for c in created]}
