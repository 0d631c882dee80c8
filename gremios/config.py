"""
Single place for default game configuration.
Change these to switch what a new game uses when the request leaves them out.
"""
# Seats at the table: seat 0 is the human, the rest are AI.
DEFAULT_NUM_PLAYERS = 3
# Character given to the human seat when none is chosen (None = random).
DEFAULT_HUMAN_CHARACTER = None
# Upper bound on AI turns played by one /ai-turn request.
MAX_AI_TURNS_PER_REQUEST = 50
