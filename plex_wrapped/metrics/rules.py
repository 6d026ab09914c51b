# # Fun facts + badges: ordered, independent threshold rules over the computed stats.

from __future__ import annotations

import dataclasses
from typing import Callable, Optional, Tuple

from ..config import RuleThresholds
from .basic import BasicStats
from .enrichment import RequestStats
from .patterns import ViewingPatterns
from ..util import round_half_up


@dataclasses.dataclass(frozen=True)
class Badge:
    name: str
    description: str
    icon: str


@dataclasses.dataclass(frozen=True)
class RuleInputs:
    basic: BasicStats
    patterns: ViewingPatterns
    thresholds: RuleThresholds
    requests: Optional[RequestStats] = None


def _hours(minutes: float) -> int:
    return int(round_half_up(minutes / 60))


# # Fun facts

def _marathon_fact(i: RuleInputs) -> Optional[str]:
    if i.patterns.longest_binge_minutes > i.thresholds.marathon_fact_minutes:
        return (
            f"Marathon Master - Binged {i.patterns.longest_binge_show} "
            f"for {_hours(i.patterns.longest_binge_minutes)} hours!"
        )
    return None


def _night_owl_fact(i: RuleInputs) -> Optional[str]:
    hour = i.patterns.most_active_hour
    t = i.thresholds
    if hour >= t.night_owl_start_hour or hour <= t.night_owl_end_hour:
        return f"Night Owl - Most active viewing at {hour}:00"
    return None


def _early_bird_fact(i: RuleInputs) -> Optional[str]:
    hour = i.patterns.most_active_hour
    t = i.thresholds
    if t.early_bird_start_hour <= hour <= t.early_bird_end_hour:
        return f"Early Bird - Started the day with content at {hour}:00 AM"
    return None


def _dedicated_fact(i: RuleInputs) -> Optional[str]:
    if i.basic.days_active > i.thresholds.dedicated_days:
        return f"Dedicated Viewer - Active on {i.basic.days_active} days this year!"
    return None


def _tv_fact(i: RuleInputs) -> Optional[str]:
    if i.basic.total_tv_episodes > i.thresholds.tv_episodes:
        return f"TV Enthusiast - Watched {i.basic.total_tv_episodes} episodes this year"
    return None


def _movie_fact(i: RuleInputs) -> Optional[str]:
    if i.basic.total_movies > i.thresholds.movies:
        return f"Movie Buff - Watched {i.basic.total_movies} movies this year"
    return None


def _curator_fact(i: RuleInputs) -> Optional[str]:
    if i.requests and i.requests.total_requests > i.thresholds.curator_fact_requests:
        return f"Content Curator - Requested {i.requests.total_requests} new titles"
    return None


def _vip_fact(i: RuleInputs) -> Optional[str]:
    """Fires for any known average under the threshold, 0.0 included; only a missing average skips it."""
    avg = i.requests.average_approval_time_hours if i.requests else None
    if avg is not None and avg < i.thresholds.vip_approval_hours:
        return f"VIP Treatment - Average request approval in {int(round_half_up(avg))} hours"
    return None


FACT_RULES: Tuple[Callable[[RuleInputs], Optional[str]], ...] = (
    _marathon_fact,
    _night_owl_fact,
    _early_bird_fact,
    _dedicated_fact,
    _tv_fact,
    _movie_fact,
    _curator_fact,
    _vip_fact,
)


# # Badges

def _marathon_badge(i: RuleInputs) -> Optional[Badge]:
    if i.patterns.longest_binge_minutes > i.thresholds.marathon_badge_minutes:
        hours = _hours(i.thresholds.marathon_badge_minutes)
        return Badge("Marathon Master", f"Binged for over {hours} hours straight", "🏃")
    return None


def _streak_badge(i: RuleInputs) -> Optional[Badge]:
    if i.patterns.longest_streak_days > i.thresholds.streak_badge_days:
        return Badge("Consistent Viewer", f"{i.patterns.longest_streak_days} day viewing streak", "🔥")
    return None


def _tv_badge(i: RuleInputs) -> Optional[Badge]:
    if i.basic.total_tv_episodes > i.thresholds.tv_episodes:
        return Badge("TV Fanatic", f"Watched over {i.thresholds.tv_episodes} episodes", "📺")
    return None


def _movie_badge(i: RuleInputs) -> Optional[Badge]:
    if i.basic.total_movies > i.thresholds.movies:
        return Badge("Cinema Enthusiast", f"Watched over {i.thresholds.movies} movies", "🎬")
    return None


def _curator_badge(i: RuleInputs) -> Optional[Badge]:
    if i.requests and i.requests.total_requests > i.thresholds.curator_badge_requests:
        return Badge("Content Curator", f"Requested over {i.thresholds.curator_badge_requests} titles", "📝")
    return None


BADGE_RULES: Tuple[Callable[[RuleInputs], Optional[Badge]], ...] = (
    _marathon_badge,
    _streak_badge,
    _tv_badge,
    _movie_badge,
    _curator_badge,
)


def generate_fun_facts(inputs: RuleInputs) -> Tuple[str, ...]:
    return tuple(fact for fact in (rule(inputs) for rule in FACT_RULES) if fact)


def generate_badges(inputs: RuleInputs) -> Tuple[Badge, ...]:
    return tuple(badge for badge in (rule(inputs) for rule in BADGE_RULES) if badge)
