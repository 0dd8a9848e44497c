"""Single-elimination bracket seeding and result propagation."""

from .bracket import (
    apply_winner,
    build,
    completion_percentage,
    render_bracket,
    set_annotation,
    simulate_tournament,
    stale_matches,
    tournament_status,
)
from .history import BracketHistory
from .models import (
    Bracket,
    Competitor,
    Match,
    Pool,
    Round,
    TournamentRecord,
    utc_now_iso,
)
from .seeding import seed
from .storage import TournamentStorage
from .validation import (
    InvalidCompetitorError,
    InvalidInputError,
    StaleBracketError,
    validate_competitor_name,
    validate_roster,
)

__all__ = [
    "Bracket",
    "BracketHistory",
    "Competitor",
    "InvalidCompetitorError",
    "InvalidInputError",
    "Match",
    "Pool",
    "Round",
    "StaleBracketError",
    "TournamentRecord",
    "TournamentStorage",
    "apply_winner",
    "build",
    "completion_percentage",
    "render_bracket",
    "seed",
    "set_annotation",
    "simulate_tournament",
    "stale_matches",
    "tournament_status",
    "utc_now_iso",
    "validate_competitor_name",
    "validate_roster",
]
