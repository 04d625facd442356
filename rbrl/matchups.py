"""
Matchup generation from the league's divisional structure.
"""

from collections import defaultdict
from typing import Dict, List

from .config import Division, SchedulerConfig
from .models import Game


class DivisionWeighted:
    """
    Intra-division opponents play twice (once home, once away); with exactly
    two divisions every cross-division pair plays once, with home/away
    alternating to balance each team.
    """

    name = "division_weighted"

    def generate(self, divisions: List[Division]) -> List[Game]:
        """
        Generate the season's matchups.

        Args:
            divisions: League divisions

        Returns:
            List[Game]: Games labelled "Game 1", "Game 2", ... in generation order
        """
        pairs = []

        for division in divisions:
            teams = division.teams
            for i in range(len(teams)):
                for j in range(i + 1, len(teams)):
                    pairs.append((teams[i], teams[j]))
                    pairs.append((teams[j], teams[i]))

        if len(divisions) == 2:
            first, second = divisions
            for i, t0 in enumerate(first.teams):
                for j, t1 in enumerate(second.teams):
                    if (i + j) % 2 == 1:
                        pairs.append((t1, t0))
                    else:
                        pairs.append((t0, t1))

        return [
            Game(home=home, away=away, label=f"Game {n}")
            for n, (home, away) in enumerate(pairs, start=1)
        ]


STRATEGIES = {
    DivisionWeighted.name: DivisionWeighted,
}


def get_strategy(name: str):
    """Get a matchup strategy by name."""
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(f"unknown strategy: {name!r}") from None


def build_matchups(config: SchedulerConfig) -> List[Game]:
    """Build the required games for the configured strategy."""
    return get_strategy(config.strategy).generate(config.divisions)


def get_matchup_summary(games: List[Game]) -> Dict:
    """
    Get summary statistics for matchups.

    Args:
        games: List of games

    Returns:
        Dict: Summary statistics
    """
    if not games:
        return {}

    team_game_counts = defaultdict(int)
    home_counts = defaultdict(int)
    for game in games:
        team_game_counts[game.home] += 1
        team_game_counts[game.away] += 1
        home_counts[game.home] += 1

    return {
        'total_matchups': len(games),
        'teams': len(team_game_counts),
        'games_per_team': dict(team_game_counts),
        'home_games': dict(home_counts),
        'avg_games_per_team': sum(team_game_counts.values()) / len(team_game_counts),
    }
