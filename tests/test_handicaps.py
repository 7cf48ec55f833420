from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import WILLINGDON_PARS, scores_over_par
from golf_league import crud, handicaps, models, schemas


@pytest.fixture
def players(db, org):
    ashok = crud.create_player(db, org.id, schemas.PlayerCreate(name="Ashok", current_handicap=14))
    bina = crud.create_player(db, org.id, schemas.PlayerCreate(name="Bina", current_handicap=9))
    return ashok, bina


def _play(db, player, course, played_on, over):
    return crud.create_round(
        db, player, course, played_on, scores_over_par(WILLINGDON_PARS, over), player.current_handicap
    )


def test_recalculation_updates_players_with_rounds(db, org, courses, players):
    ashok, bina = players
    willingdon = courses["Willingdon Golf Club"]
    _play(db, ashok, willingdon, date(2024, 12, 7), 8)
    _play(db, ashok, willingdon, date(2024, 12, 21), 12)
    # fuera del mes
    _play(db, ashok, willingdon, date(2025, 1, 2), 18)

    result = handicaps.run_monthly_recalculation(db, org, "2024-12")

    assert result.month == "2024-12"
    assert result.players_updated == 1
    assert len(result.snapshots) == 2

    db.refresh(ashok)
    # k = 0.5: 0.5 * 10 + 0.5 * 14 = 12
    assert ashok.current_handicap == 12

    snap = crud.get_snapshot(db, ashok.id, "2024-12")
    assert snap.prev_handicap == 14
    assert snap.rounds_count == 2
    assert snap.avg_monthly_over_par == 10
    assert snap.delta == -2
    assert snap.new_handicap == 12


def test_player_without_rounds_keeps_handicap(db, org, courses, players):
    _, bina = players

    handicaps.run_monthly_recalculation(db, org, "2024-12")

    db.refresh(bina)
    assert bina.current_handicap == 9
    snap = crud.get_snapshot(db, bina.id, "2024-12")
    assert snap.rounds_count == 0
    assert snap.avg_monthly_over_par is None
    assert snap.delta == 0
    assert snap.new_handicap == snap.prev_handicap == 9


def test_recalculation_runs_once_per_month(db, org, courses, players):
    ashok, bina = players
    _play(db, ashok, courses["Willingdon Golf Club"], date(2024, 12, 7), 10)

    handicaps.run_monthly_recalculation(db, org, "2024-12")
    again = handicaps.run_monthly_recalculation(db, org, "2024-12")

    assert again.snapshots == []
    assert again.players_updated == 0
    assert sorted(again.skipped) == sorted([ashok.id, bina.id])

    db.refresh(ashok)
    assert ashok.current_handicap == 12
    assert len(crud.get_snapshots(db, org.id, month="2024-12")) == 2


def test_recalculation_defaults_to_previous_month(db, org, players):
    result = handicaps.run_monthly_recalculation(db, org, today=date(2025, 1, 15))
    assert result.month == "2024-12"


def test_recalculation_rejects_bad_month(db, org, players):
    with pytest.raises(ValueError):
        handicaps.run_monthly_recalculation(db, org, "2024-13")


def test_recalculation_uses_season_settings(db, org, courses, players):
    ashok, _ = players
    crud.update_season_settings(db, org, schemas.SeasonSettingsUpdate(k_factor=0.3, change_cap=1))
    _play(db, ashok, courses["Willingdon Golf Club"], date(2024, 12, 7), 2)

    handicaps.run_monthly_recalculation(db, org, "2024-12")

    db.refresh(ashok)
    # 0.3 * 2 + 0.7 * 14 = 10.4 -> tope de 1
    assert ashok.current_handicap == 13


def test_snapshot_month_is_unique_per_player(db, org, players):
    ashok, _ = players
    db.add(models.HandicapSnapshot(
        player_id=ashok.id, month="2024-11", prev_handicap=14, rounds_count=0, delta=0, new_handicap=14,
    ))
    db.commit()

    db.add(models.HandicapSnapshot(
        player_id=ashok.id, month="2024-11", prev_handicap=14, rounds_count=0, delta=0, new_handicap=14,
    ))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_summary_text(db, org, courses, players):
    ashok, _ = players
    _play(db, ashok, courses["Willingdon Golf Club"], date(2024, 12, 7), 10)
    handicaps.run_monthly_recalculation(db, org, "2024-12")

    summary = handicaps.monthly_update_summary(db, org, "2024-12")
    text = summary["summary"]

    assert summary["month"] == "2024-12"
    assert len(summary["snapshots"]) == 2
    assert text.startswith("Sunday Group - December 2024 Handicap Update")
    assert "Ashok: 14 → 12 (-2) ↘" in text
    assert "1 rounds, Avg: +10.0" in text
    assert "Bina: 9 → 9 (0) →" in text
    assert "0 rounds, Avg: N/A" in text
    assert text.endswith("Keep playing and improving!")


def test_snapshots_csv(db, org, courses, players):
    ashok, _ = players
    _play(db, ashok, courses["Willingdon Golf Club"], date(2024, 12, 7), 10)
    handicaps.run_monthly_recalculation(db, org, "2024-12")

    lines = handicaps.snapshots_csv(crud.get_snapshots(db, org.id)).splitlines()

    assert lines[0] == ",".join(handicaps.SNAPSHOT_CSV_HEADER)
    assert lines[1].startswith("Ashok,2024-12,14,1,10.0,-2,12,")
    assert lines[2].startswith("Bina,2024-12,9,0,N/A,0,9,")


def test_lost_race_rolls_back_the_player(db, org, courses, players, monkeypatch):
    ashok, bina = players
    _play(db, ashok, courses["Willingdon Golf Club"], date(2024, 12, 7), 10)
    # otro proceso ya guardo la foto de Ashok y el chequeo previo no la ve
    db.add(models.HandicapSnapshot(
        player_id=ashok.id, month="2024-12", prev_handicap=14, rounds_count=1,
        avg_monthly_over_par=10, delta=0, new_handicap=14,
    ))
    db.commit()
    monkeypatch.setattr(crud, "get_snapshot", lambda *_args: None)

    result = handicaps.run_monthly_recalculation(db, org, "2024-12")

    assert result.skipped == [ashok.id]
    assert [s.player_id for s in result.snapshots] == [bina.id]
    assert result.players_updated == 0

    db.refresh(ashok)
    assert ashok.current_handicap == 14
    count = (
        db.query(models.HandicapSnapshot)
        .filter(models.HandicapSnapshot.player_id == ashok.id, models.HandicapSnapshot.month == "2024-12")
        .count()
    )
    assert count == 1
