"""
Rule violations raised by the reducer.
All subclass ValueError so callers that only care about "rejected" can catch that.
The reducer works on a copy, so the caller's state is untouched when one is raised.
"""


class GameRuleError(ValueError):
    """An action was rejected. No state was changed."""
    kind = "rule"


class InsufficientFunds(GameRuleError):
    """Coin or reserve balance below the cost of the action."""
    kind = "insufficient_funds"


class InvalidIndex(GameRuleError):
    """Land, inn, treasure or event index out of range, or unknown guild."""
    kind = "invalid_index"


class IllegalAction(GameRuleError):
    """Wrong phase, wrong player, per-turn cap reached, or wrong character."""
    kind = "illegal_action"
