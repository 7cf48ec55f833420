from datetime import date

import pytest

from conftest import WILLINGDON_PARS, scores_over_par
from golf_league import crud, leaderboard, schemas


@pytest.fixture
def december(db, org, courses):
    willingdon = courses["Willingdon Golf Club"]
    ashok = crud.create_player(db, org.id, schemas.PlayerCreate(name="Ashok", current_handicap=16))
    dev = crud.create_player(db, org.id, schemas.PlayerCreate(name="Dev", current_handicap=4))
    crud.create_player(db, org.id, schemas.PlayerCreate(name="Idle", current_handicap=20))

    crud.create_round(db, ashok, willingdon, date(2024, 12, 7), scores_over_par(WILLINGDON_PARS, 10), 16)
    crud.create_round(db, dev, willingdon, date(2024, 12, 14), scores_over_par(WILLINGDON_PARS, 5), 4)
    return ashok, dev


def test_round_view_on_slope_course(db, org, courses, december):
    ashok, _ = december
    r = crud.get_rounds(db, org.id, player_id=ashok.id)[0]

    view = leaderboard.round_view(r)

    assert view["player_name"] == "Ashok"
    assert view["course_name"] == "Willingdon Golf Club"
    assert view["gross_capped"] == 75
    assert view["net"] == 59
    assert view["over_par"] == 10
    assert view["handicap_index"] == pytest.approx(16.436, abs=1e-3)
    assert view["slope_adjusted_course_handicap"] == 16
    assert view["slope_adjusted_dth"] == -6
    assert view["normalized_over_par"] == 10


def test_round_view_without_slope(db, org, courses):
    bpgc = courses["BPGC"]
    pars = crud.hole_pars(db, bpgc)
    p = crud.create_player(db, org.id, schemas.PlayerCreate(name="Zed", current_handicap=12))
    r = crud.create_round(db, p, bpgc, date(2024, 12, 1), scores_over_par(pars, 15), 12)

    view = leaderboard.round_view(r)

    assert view["course_slope"] is None
    assert view["handicap_index"] is None
    assert view["slope_adjusted_course_handicap"] == 12
    assert view["slope_adjusted_dth"] == 3
    assert view["normalized_over_par"] == 15


def test_build_leaderboard_ranks_by_dth(db, org, december):
    rows = leaderboard.build_leaderboard(db, org, month="2024-12")

    assert [r["player_name"] for r in rows] == ["Ashok", "Dev"]
    assert [r["rank"] for r in rows] == [1, 2]
    assert rows[0]["avg_dth"] == -6
    assert rows[1]["avg_dth"] == 1
    assert rows[0]["rounds_count"] == 1
    assert rows[0]["last_round_date"] == date(2024, 12, 7)


def test_build_leaderboard_other_metric(db, org, december):
    crud.update_season_settings(db, org, schemas.SeasonSettingsUpdate(leaderboard_metric="avg_over_par"))

    rows = leaderboard.build_leaderboard(db, org, month="2024-12")

    assert [r["player_name"] for r in rows] == ["Dev", "Ashok"]


def test_build_leaderboard_empty_month(db, org, december):
    assert leaderboard.build_leaderboard(db, org, month="2024-11") == []


def test_finalize_and_announce_winner(db, org, december):
    rows = leaderboard.finalize_month(db, org, "2024-12")
    assert [r.player_name for r in rows] == ["Ashok", "Dev"]
    assert all(r.is_finalized for r in rows)

    # finalizar otra vez sustituye la foto
    assert len(leaderboard.finalize_month(db, org, "2024-12")) == 2

    history = leaderboard.leaderboard_history(db, org)
    assert history == [{
        "month": "2024-12",
        "player_count": 2,
        "avg_rounds_per_player": 1,
        "winner": "Ashok",
        "runner_up": "Dev",
    }]

    w = leaderboard.announce_winner(db, org, "2024-12")
    assert w.winner_name == "Ashok"
    assert w.winner_score == -6
    assert w.runner_up_name == "Dev"
    assert w.runner_up_score == 1

    with pytest.raises(leaderboard.WinnerAlreadyAnnounced):
        leaderboard.announce_winner(db, org, "2024-12")


def test_announce_requires_finalized_month(db, org, december):
    with pytest.raises(leaderboard.LeaderboardNotFinalized):
        leaderboard.announce_winner(db, org, "2024-12")


def test_player_stats(db, org, courses, december):
    ashok, _ = december
    crud.create_round(
        db, ashok, courses["Willingdon Golf Club"], date(2024, 12, 20), scores_over_par(WILLINGDON_PARS, 14), 16
    )

    stats = leaderboard.player_stats(db, ashok, month="2024-12")

    assert stats["rounds_count"] == 2
    assert stats["avg_over_par"] == 12
    assert stats["avg_dth"] == -4
    assert stats["best_net"] == 59
    assert stats["worst_net"] == 63
    assert stats["first_round_date"] == date(2024, 12, 7)
    assert stats["last_round_date"] == date(2024, 12, 20)
