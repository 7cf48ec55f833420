"""
Recalculo mensual de handicaps.

Para cada jugador de la organizacion y cada mes se guarda exactamente una
foto (HandicapSnapshot). La foto y el cambio de current_handicap del jugador
van en la misma transaccion: o se guardan las dos cosas o ninguna.
"""
import csv
import io
import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import crud, models
from .golf_calc import average_over_par, update_handicap
from .months import month_label, parse_month, previous_month

logger = logging.getLogger(__name__)

# un solo recalculo a la vez por organizacion (dentro del proceso);
# entre procesos manda la unique (player_id, month)
_org_locks: dict[int, threading.Lock] = defaultdict(threading.Lock)
_org_locks_guard = threading.Lock()


def _lock_for(organization_id: int) -> threading.Lock:
    with _org_locks_guard:
        return _org_locks[organization_id]


@dataclass
class RecalculationResult:
    month: str
    players_updated: int = 0
    snapshots: list = field(default_factory=list)
    skipped: list = field(default_factory=list)

    def to_dict(self):
        return {
            "month": self.month,
            "players_updated": self.players_updated,
            "snapshots": [snapshot_dict(s) for s in self.snapshots],
            "skipped": self.skipped,
        }


def snapshot_dict(s: models.HandicapSnapshot) -> dict:
    return {
        "id": s.id,
        "player_id": s.player_id,
        "player_name": s.player.name if s.player else None,
        "month": s.month,
        "prev_handicap": s.prev_handicap,
        "rounds_count": s.rounds_count,
        "avg_monthly_over_par": s.avg_monthly_over_par,
        "delta": s.delta,
        "new_handicap": s.new_handicap,
        "created_at": s.created_at,
    }


def _recalculate_player(db: Session, player: models.Player, month: str, k_factor: float, change_cap: float):
    monthly_rounds = crud.rounds_for_player_in_month(db, player.id, month)

    prev_handicap = player.current_handicap
    new_handicap = prev_handicap
    avg_monthly_over_par = None

    # sin vueltas no se llama al calculo: el handicap no cambia
    if monthly_rounds:
        avg_monthly_over_par = average_over_par([r.over_par for r in monthly_rounds])
        new_handicap = update_handicap(avg_monthly_over_par, prev_handicap, k_factor, change_cap)
        player.current_handicap = new_handicap

    snapshot = models.HandicapSnapshot(
        player_id=player.id,
        month=month,
        prev_handicap=prev_handicap,
        rounds_count=len(monthly_rounds),
        avg_monthly_over_par=avg_monthly_over_par,
        delta=new_handicap - prev_handicap,
        new_handicap=new_handicap,
    )
    db.add(snapshot)
    return snapshot


def run_monthly_recalculation(
    db: Session,
    organization: models.Organization,
    target_month: str | None = None,
    today: date | None = None,
) -> RecalculationResult:
    month = target_month or previous_month(today)
    parse_month(month)

    settings = crud.get_season_settings(db, organization)
    k_factor = settings.k_factor
    change_cap = settings.change_cap

    result = RecalculationResult(month=month)

    with _lock_for(organization.id):
        for player in crud.get_players(db, organization.id):
            if crud.get_snapshot(db, player.id, month):
                result.skipped.append(player.id)
                continue

            snapshot = _recalculate_player(db, player, month, k_factor, change_cap)
            try:
                db.commit()
            except IntegrityError:
                # otro proceso ya guardo la foto de este mes
                db.rollback()
                logger.warning("Handicap snapshot for player %s in %s already exists, skipping", player.id, month)
                result.skipped.append(player.id)
                continue

            db.refresh(snapshot)
            result.snapshots.append(snapshot)
            if snapshot.rounds_count > 0:
                result.players_updated += 1

    logger.info(
        "Handicap recalculation for %s (%s): %d players updated, %d snapshots, %d skipped",
        organization.slug,
        month,
        result.players_updated,
        len(result.snapshots),
        len(result.skipped),
    )
    return result


# ---------------------------------------------------------------------------------
# ------------------------------- Resumen / export --------------------------------
# ---------------------------------------------------------------------------------

def summary_text(group_name: str, month: str, snapshots) -> str:
    lines = [f"{group_name} - {month_label(month)} Handicap Update", ""]

    for s in snapshots:
        if s.delta > 0:
            direction, delta_str = "↗", f"+{s.delta}"
        elif s.delta < 0:
            direction, delta_str = "↘", str(s.delta)
        else:
            direction, delta_str = "→", "0"

        avg = "N/A" if s.avg_monthly_over_par is None else f"{s.avg_monthly_over_par:+.1f}"
        lines.append(f"{s.player.name}: {s.prev_handicap} → {s.new_handicap} ({delta_str}) {direction}")
        lines.append(f"   {s.rounds_count} rounds, Avg: {avg}")
        lines.append("")

    lines.append("Keep playing and improving!")
    return "\n".join(lines)


def monthly_update_summary(db: Session, organization: models.Organization, month: str) -> dict:
    parse_month(month)
    settings = crud.get_season_settings(db, organization)
    snapshots = crud.get_snapshots(db, organization.id, month=month)
    return {
        "month": month,
        "snapshots": [snapshot_dict(s) for s in snapshots],
        "summary": summary_text(settings.group_name, month, snapshots),
    }


SNAPSHOT_CSV_HEADER = [
    "Player",
    "Month",
    "Previous Handicap",
    "Rounds Count",
    "Avg Monthly Over Par",
    "Change",
    "New Handicap",
    "Date",
]


def snapshots_csv(snapshots) -> str:
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(SNAPSHOT_CSV_HEADER)
    for s in snapshots:
        writer.writerow([
            s.player.name,
            s.month,
            s.prev_handicap,
            s.rounds_count,
            "N/A" if s.avg_monthly_over_par is None else f"{s.avg_monthly_over_par:.1f}",
            s.delta,
            s.new_handicap,
            s.created_at.date().isoformat() if s.created_at else "",
        ])
    return out.getvalue()
