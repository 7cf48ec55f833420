import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Optional, Sequence

HOLES_PER_ROUND = 18

# 113 = slope estandar, 110 = slope de Willingdon (campo de referencia de la liga)
STANDARD_SLOPE = 113
REFERENCE_SLOPE = 110

DEFAULT_K_FACTOR = 0.3
DEFAULT_CHANGE_CAP = 2.0


class InvalidInputError(ValueError):
    def __init__(self, message: str, kind: str = "invalid"):
        super().__init__(message)
        self.kind = kind


@dataclass(frozen=True)
class RoundResult:
    raw_scores: tuple
    capped_scores: tuple
    gross_capped: int
    net: int
    over_par: int


@dataclass(frozen=True)
class SlopeAdjustment:
    handicap_index: Optional[float]
    slope_adjusted_course_handicap: float
    slope_adjusted_dth: float
    normalized_over_par: float


def round_half_up(value) -> int:
    # 17.4 -> 17, 17.5 -> 18; con Fraction el empate es exacto
    return int(math.floor(value + Fraction(1, 2)))


def _exact(value) -> Fraction:
    # 0.3 -> 3/10, 4/3 (float) -> 4/3
    return Fraction(value).limit_denominator(10**6)


# ---------------------------------------------------------------------------------
# ------------------------------- Tarjeta / vuelta --------------------------------
# ---------------------------------------------------------------------------------

def cap_hole(raw_score: int, par: int) -> int:
    # maximo doble bogey
    return min(raw_score, par + 2)


def compute_round(
    raw_scores: Sequence[int],
    hole_pars: Sequence[int],
    course_handicap: int,
    course_par_total: int,
) -> RoundResult:
    """
    Capea cada hoyo a par + 2 y calcula gross capeado, neto y sobre par.
    Lanza InvalidInputError si no hay exactamente 18 golpes y 18 pares.
    """
    if len(raw_scores) != HOLES_PER_ROUND or len(hole_pars) != HOLES_PER_ROUND:
        raise InvalidInputError(
            f"Must provide exactly {HOLES_PER_ROUND} hole scores and pars "
            f"(got {len(raw_scores)} scores, {len(hole_pars)} pars)",
            kind="length_mismatch",
        )

    capped = tuple(cap_hole(s, p) for s, p in zip(raw_scores, hole_pars))
    gross_capped = sum(capped)

    return RoundResult(
        raw_scores=tuple(raw_scores),
        capped_scores=capped,
        gross_capped=gross_capped,
        net=gross_capped - course_handicap,
        over_par=gross_capped - course_par_total,
    )


# ---------------------------------------------------------------------------------
# ------------------------------- Handicap mensual --------------------------------
# ---------------------------------------------------------------------------------

def average_over_par(over_par_values: Sequence[float]) -> float:
    if not over_par_values:
        return 0
    return sum(over_par_values) / len(over_par_values)


def update_handicap(
    avg_monthly_over_par: float,
    previous_handicap: int,
    k_factor: float = DEFAULT_K_FACTOR,
    change_cap: float = DEFAULT_CHANGE_CAP,
) -> int:
    """
    Media ponderada entre el sobre-par medio del mes y el handicap previo,
    con el cambio limitado a +/- change_cap y suelo en 0.
    Solo se llama si el jugador ha jugado alguna vuelta ese mes.
    """
    k = _exact(k_factor)
    cap = _exact(change_cap)
    avg = _exact(avg_monthly_over_par)
    prev = _exact(previous_handicap)

    unclamped = k * avg + (1 - k) * prev

    delta = unclamped - prev
    clamped_delta = max(-cap, min(cap, delta))
    clamped = prev + clamped_delta

    floored = max(0, clamped)
    return round_half_up(floored)


# ---------------------------------------------------------------------------------
# ------------------------------- Slope / hcp campo -------------------------------
# ---------------------------------------------------------------------------------

def handicap_index(base_handicap: float) -> float:
    return base_handicap * STANDARD_SLOPE / REFERENCE_SLOPE


def course_handicap(hcp_index: float, slope: float) -> int:
    return round_half_up(hcp_index * slope / STANDARD_SLOPE)


def slope_adjusted_dth(over_par: float, slope_adjusted_course_handicap: float) -> float:
    return over_par - slope_adjusted_course_handicap


def normalized_over_par(over_par: float, hcp_index: float, course_slope: float) -> float:
    # sobre par equivalente en Willingdon
    differential = course_handicap(hcp_index, course_slope) - course_handicap(hcp_index, REFERENCE_SLOPE)
    return over_par - differential


def slope_adjusted_round(over_par: float, base_handicap: float, course_slope: float) -> SlopeAdjustment:
    index = handicap_index(base_handicap)
    ch = course_handicap(index, course_slope)
    return SlopeAdjustment(
        handicap_index=index,
        slope_adjusted_course_handicap=ch,
        slope_adjusted_dth=slope_adjusted_dth(over_par, ch),
        normalized_over_par=normalized_over_par(over_par, index, course_slope),
    )


def round_adjustment(over_par: float, base_handicap: float, course_slope: Optional[float]) -> SlopeAdjustment:
    """
    Igual que slope_adjusted_round, pero si el campo no tiene slope se usa
    el handicap base tal cual (sin ajuste).
    """
    if course_slope is None:
        return SlopeAdjustment(
            handicap_index=None,
            slope_adjusted_course_handicap=base_handicap,
            slope_adjusted_dth=over_par - base_handicap,
            normalized_over_par=over_par,
        )
    return slope_adjusted_round(over_par, base_handicap, course_slope)
