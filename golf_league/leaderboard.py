import logging
from collections import defaultdict
from datetime import datetime

from sqlalchemy.orm import Session

from . import crud, models
from .golf_calc import round_adjustment, slope_adjusted_round
from .months import parse_month

logger = logging.getLogger(__name__)

LEADERBOARD_METRICS = ("avg_dth", "avg_over_par", "avg_net")


class WinnerAlreadyAnnounced(Exception):
    pass


class LeaderboardNotFinalized(Exception):
    pass


def round_dth(r: models.Round, current_handicap: int) -> float:
    """
    DTH de una vuelta para la clasificacion: con slope se usa el handicap
    actual del jugador llevado al campo; sin slope, el hcp de juego guardado.
    """
    slope = r.course.slope if r.course else None
    if slope is None:
        return r.over_par - r.course_handicap
    return slope_adjusted_round(r.over_par, current_handicap, slope).slope_adjusted_dth


def round_view(r: models.Round) -> dict:
    slope = r.course.slope if r.course else None
    adj = round_adjustment(r.over_par, r.course_handicap, slope)
    return {
        "id": r.id,
        "player_id": r.player_id,
        "player_name": r.player.name if r.player else None,
        "course_id": r.course_id,
        "course_name": r.course.name if r.course else None,
        "course_slope": slope,
        "played_on": r.played_on,
        "raw_scores": r.raw_scores,
        "capped_scores": r.capped_scores,
        "gross_capped": r.gross_capped,
        "course_handicap": r.course_handicap,
        "net": r.net,
        "over_par": r.over_par,
        "source": r.source,
        "status": r.status,
        "handicap_index": adj.handicap_index,
        "slope_adjusted_course_handicap": adj.slope_adjusted_course_handicap,
        "slope_adjusted_dth": adj.slope_adjusted_dth,
        "normalized_over_par": adj.normalized_over_par,
    }


def _avg(values):
    return (sum(values) / len(values)) if values else None


def build_leaderboard(db: Session, organization: models.Organization, month: str | None = None):
    settings = crud.get_season_settings(db, organization)
    metric = settings.leaderboard_metric if settings.leaderboard_metric in LEADERBOARD_METRICS else "avg_dth"

    rounds_by_player = defaultdict(list)
    for r in crud.get_rounds(db, organization.id, month=month):
        rounds_by_player[r.player_id].append(r)

    rows = []
    for p in crud.get_players(db, organization.id):
        rps = rounds_by_player.get(p.id)
        if not rps:
            continue

        rows.append({
            "player_id": p.id,
            "player_name": p.name,
            "current_handicap": p.current_handicap,
            "rounds_count": len(rps),
            "avg_net": _avg([r.net for r in rps]),
            "avg_over_par": _avg([r.over_par for r in rps]),
            "avg_dth": _avg([round_dth(r, p.current_handicap) for r in rps]),
            "avg_gross_capped": _avg([r.gross_capped for r in rps]),
            "last_round_date": max(r.played_on for r in rps),
        })

    # menor es mejor en todas las metricas
    rows = sorted(rows, key=lambda row: (row[metric], row["player_name"]))
    for i, row in enumerate(rows, start=1):
        row["rank"] = i
    return rows


#---------------------------------------------------------------------------------
# ------------------------------- Historico mensual -------------------------------
# --------------------------------------------------------------------------------

def finalize_month(db: Session, organization: models.Organization, month: str):
    parse_month(month)
    rows = build_leaderboard(db, organization, month=month)

    # se sustituye la foto anterior del mes
    db.query(models.MonthlyLeaderboard).filter(
        models.MonthlyLeaderboard.organization_id == organization.id,
        models.MonthlyLeaderboard.month == month,
    ).delete()

    for row in rows:
        db.add(models.MonthlyLeaderboard(
            organization_id=organization.id,
            player_id=row["player_id"],
            month=month,
            player_name=row["player_name"],
            rounds_count=row["rounds_count"],
            avg_net=row["avg_net"],
            avg_over_par=row["avg_over_par"],
            avg_gross_capped=row["avg_gross_capped"],
            avg_dth=row["avg_dth"],
            current_handicap=row["current_handicap"],
            rank=row["rank"],
            last_round_date=row["last_round_date"],
            is_finalized=True,
        ))

    db.commit()
    logger.info("Leaderboard for %s (%s) finalized with %d players", organization.slug, month, len(rows))
    return monthly_snapshot(db, organization, month)


def monthly_snapshot(db: Session, organization: models.Organization, month: str):
    return (
        db.query(models.MonthlyLeaderboard)
        .filter(
            models.MonthlyLeaderboard.organization_id == organization.id,
            models.MonthlyLeaderboard.month == month,
            models.MonthlyLeaderboard.is_finalized == True,
        )
        .order_by(models.MonthlyLeaderboard.rank.asc())
        .all()
    )


def leaderboard_history(db: Session, organization: models.Organization):
    rows_by_month = defaultdict(list)
    finalized = (
        db.query(models.MonthlyLeaderboard)
        .filter(
            models.MonthlyLeaderboard.organization_id == organization.id,
            models.MonthlyLeaderboard.is_finalized == True,
        )
        .all()
    )
    for row in finalized:
        rows_by_month[row.month].append(row)

    history = []
    for month in sorted(rows_by_month, reverse=True):
        rows = sorted(rows_by_month[month], key=lambda r: r.rank)
        history.append({
            "month": month,
            "player_count": len(rows),
            "avg_rounds_per_player": _avg([r.rounds_count for r in rows]),
            "winner": rows[0].player_name if rows else None,
            "runner_up": rows[1].player_name if len(rows) > 1 else None,
        })
    return history


def get_winners(db: Session, organization: models.Organization):
    return (
        db.query(models.MonthlyWinner)
        .filter(models.MonthlyWinner.organization_id == organization.id)
        .order_by(models.MonthlyWinner.month.desc())
        .all()
    )


def announce_winner(db: Session, organization: models.Organization, month: str):
    existing = (
        db.query(models.MonthlyWinner)
        .filter(models.MonthlyWinner.organization_id == organization.id, models.MonthlyWinner.month == month)
        .first()
    )
    if existing:
        raise WinnerAlreadyAnnounced(f"Winner for {month} already announced")

    rows = monthly_snapshot(db, organization, month)
    if not rows:
        raise LeaderboardNotFinalized(f"Leaderboard for {month} is not finalized")

    settings = crud.get_season_settings(db, organization)
    metric = settings.leaderboard_metric if settings.leaderboard_metric in LEADERBOARD_METRICS else "avg_dth"

    winner = rows[0]
    runner_up = rows[1] if len(rows) > 1 else None

    w = models.MonthlyWinner(
        organization_id=organization.id,
        month=month,
        winner_id=winner.player_id,
        winner_name=winner.player_name,
        winner_score=getattr(winner, metric),
        runner_up_id=runner_up.player_id if runner_up else None,
        runner_up_name=runner_up.player_name if runner_up else None,
        runner_up_score=getattr(runner_up, metric) if runner_up else None,
        announced_at=datetime.utcnow(),
    )
    db.add(w)
    db.commit()
    db.refresh(w)
    return w


#---------------------------------------------------------------------------------
# ----------------------------- Estadisticas jugador ------------------------------
# --------------------------------------------------------------------------------

def player_stats(db: Session, player: models.Player, month: str | None = None):
    rps = crud.get_rounds(db, player.organization_id, month=month, player_id=player.id)
    nets = [r.net for r in rps]
    dates = [r.played_on for r in rps]

    return {
        "player_id": player.id,
        "month": month,
        "rounds_count": len(rps),
        "avg_net": _avg(nets),
        "avg_over_par": _avg([r.over_par for r in rps]),
        "avg_dth": _avg([r.over_par - r.course_handicap for r in rps]),
        "avg_gross_capped": _avg([r.gross_capped for r in rps]),
        "best_net": min(nets) if nets else None,
        "worst_net": max(nets) if nets else None,
        "first_round_date": min(dates) if dates else None,
        "last_round_date": max(dates) if dates else None,
    }
