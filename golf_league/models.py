from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .db import Base


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False, index=True)
    is_parent = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    players = relationship("Player", back_populates="organization", cascade="all, delete-orphan")
    courses = relationship("Course", back_populates="organization", cascade="all, delete-orphan")
    season_settings = relationship(
        "SeasonSettings",
        back_populates="organization",
        uselist=False,
        cascade="all, delete-orphan",
    )


class SeasonSettings(Base):
    __tablename__ = "season_settings"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, unique=True)

    group_name = Column(String, nullable=False, default="Golf League")
    season_end = Column(Date, nullable=True)
    leaderboard_metric = Column(String, nullable=False, default="avg_dth")  # avg_dth / avg_over_par / avg_net
    k_factor = Column(Float, nullable=False, default=0.5)
    change_cap = Column(Float, nullable=False, default=2.0)

    organization = relationship("Organization", back_populates="season_settings")


class Player(Base):
    __tablename__ = "players"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    name = Column(String, nullable=False, index=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)

    # solo lo cambia el recalculo mensual (o un admin a mano)
    current_handicap = Column(Integer, nullable=False, default=0)
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    organization = relationship("Organization", back_populates="players")
    rounds = relationship("Round", back_populates="player", cascade="all, delete-orphan")
    handicap_snapshots = relationship(
        "HandicapSnapshot",
        back_populates="player",
        cascade="all, delete-orphan",
    )


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    name = Column(String, nullable=False, index=True)
    tees = Column(String, nullable=True, default="Blue")
    par_total = Column(Integer, nullable=False, default=72)

    rating = Column(Float, nullable=True)
    slope = Column(Float, nullable=True)  # sin slope -> sin ajuste

    created_at = Column(DateTime, default=datetime.utcnow)

    organization = relationship("Organization", back_populates="courses")
    holes = relationship(
        "Hole",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Hole.number",
    )
    rounds = relationship("Round", back_populates="course", cascade="all, delete-orphan")


class Hole(Base):
    __tablename__ = "holes"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)

    number = Column(Integer, nullable=False)      # 1..18
    par = Column(Integer, nullable=False)         # 3/4/5
    distance = Column(Integer, nullable=True)

    course = relationship("Course", back_populates="holes")


class Round(Base):
    __tablename__ = "rounds"

    id = Column(Integer, primary_key=True, index=True)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    played_on = Column(Date, nullable=False, index=True)

    raw_scores = Column(JSON, nullable=False)       # 18 golpes brutos
    capped_scores = Column(JSON, nullable=False)    # calculado
    gross_capped = Column(Integer, nullable=False)  # calculado
    course_handicap = Column(Integer, nullable=False)
    net = Column(Integer, nullable=False)           # calculado
    over_par = Column(Integer, nullable=False)      # calculado

    source = Column(String, nullable=False, default="app")  # app / admin / import
    status = Column(String, nullable=False, default="ok")   # ok / needs_review
    created_at = Column(DateTime, default=datetime.utcnow)

    player = relationship("Player", back_populates="rounds")
    course = relationship("Course", back_populates="rounds")


class HandicapSnapshot(Base):
    __tablename__ = "handicap_snapshots"
    __table_args__ = (
        UniqueConstraint("player_id", "month", name="uq_handicap_snapshot_player_month"),
    )

    id = Column(Integer, primary_key=True, index=True)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False, index=True)
    month = Column(String, nullable=False)  # YYYY-MM

    prev_handicap = Column(Integer, nullable=False)
    rounds_count = Column(Integer, nullable=False)
    avg_monthly_over_par = Column(Float, nullable=True)  # None si no hay vueltas
    delta = Column(Integer, nullable=False)
    new_handicap = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    player = relationship("Player", back_populates="handicap_snapshots")


class MonthlyLeaderboard(Base):
    __tablename__ = "monthly_leaderboards"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    month = Column(String, nullable=False, index=True)

    player_name = Column(String, nullable=False)
    rounds_count = Column(Integer, nullable=False)
    avg_net = Column(Float, nullable=False)
    avg_over_par = Column(Float, nullable=False)
    avg_gross_capped = Column(Float, nullable=False)
    avg_dth = Column(Float, nullable=False)
    current_handicap = Column(Integer, nullable=False)
    rank = Column(Integer, nullable=False)
    last_round_date = Column(Date, nullable=False)
    is_finalized = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)


class MonthlyWinner(Base):
    __tablename__ = "monthly_winners"
    __table_args__ = (
        UniqueConstraint("organization_id", "month", name="uq_monthly_winner_org_month"),
    )

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    month = Column(String, nullable=False)

    winner_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    winner_name = Column(String, nullable=False)
    winner_score = Column(Float, nullable=False)

    runner_up_id = Column(Integer, ForeignKey("players.id"), nullable=True)
    runner_up_name = Column(String, nullable=True)
    runner_up_score = Column(Float, nullable=True)

    announced_at = Column(DateTime, default=datetime.utcnow)
