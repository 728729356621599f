"""Registry of ranking strategies with a default fallback."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from domain.common import GameConfig, PlayerGameStats
from domain.protocol import RankingStrategy
from domain.ranking.default_strategy import DefaultRankingStrategy
from domain.ranking.warzone_strategy import WarzoneRankingStrategy

logger = logging.getLogger(__name__)


class StrategyRegistry:
    """Ordered strategy list; the first match wins, otherwise the default is used."""

    def __init__(
        self,
        default: RankingStrategy | None = None,
        strategies: Iterable[RankingStrategy] = (),
    ) -> None:
        self.default: RankingStrategy = default or DefaultRankingStrategy()
        self._strategies: list[RankingStrategy] = []
        for strategy in strategies:
            self.register(strategy)

    def register(self, strategy: RankingStrategy) -> None:
        """Append one strategy; earlier registrations take precedence."""
        if not isinstance(strategy, RankingStrategy):
            raise TypeError(f"Not a ranking strategy: {strategy!r}")
        self._strategies.append(strategy)

    def strategies(self) -> list[RankingStrategy]:
        return list(self._strategies)

    def select(self, game: GameConfig) -> RankingStrategy:
        for strategy in self._strategies:
            if strategy.supports_game(game.slug):
                return strategy
        return self.default

    def calculate(self, stats: PlayerGameStats, game: GameConfig) -> float:
        strategy = self.select(game)
        score = float(strategy.calculate(stats, game))
        logger.debug(
            "scored player=%s game=%s strategy=%s score=%.4f",
            stats.player_id,
            game.slug,
            type(strategy).__name__,
            score,
        )
        return score


def build_default_registry() -> StrategyRegistry:
    """Registry with every built-in game-specific strategy."""
    return StrategyRegistry(strategies=[WarzoneRankingStrategy()])


__all__ = ["StrategyRegistry", "build_default_registry"]
