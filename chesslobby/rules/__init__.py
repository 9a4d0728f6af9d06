from chesslobby.rules.engine import ChessRulesEngine, RulesEngine  # noqa: F401
