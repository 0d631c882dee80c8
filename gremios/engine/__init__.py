"""
Gremios Rules Engine
Core engine without web framework, database, or UI
"""

DICE_SIDES = 6

# Economy
STARTING_COINS = 3
INVESTMENT_COST = 2
LAND_COST = 2
CULTIVATE_COST = 1
INN_COST = 6
INN_REPAIR_COST = 1
ARTISAN_TREASURE_COST = 4
MUTINY_ABILITY_COST = 1

# Investment limits
MAX_INVESTMENTS_PER_TURN = 2
MAX_INVESTMENTS_MERCHANT = 3
MAX_GUILD_INVESTMENTS = 4
MAX_EXPEDITION_INVESTMENTS = 4

# Victory
WINNING_VP = 10
INN_VP = 2
DISCOVERER_EMBLEM_VP = 1
DISCOVERER_MIN_TREASURES = 2

# Expedition success range (inclusive, sum of two dice)
EXPEDITION_SUCCESS_MIN = 6
EXPEDITION_SUCCESS_MAX = 8

# Production roll that clears every temporary event instead of paying a guild
CLEARING_ROLL = 7

# Tax collection hits players holding at least this many coins
TAX_THRESHOLD = 4

# Deck management
INITIAL_DISCARD_COUNT = 3
MIN_CARDS_AFTER_DISCARD = 3

# Event feed
MAX_LOG_MESSAGES = 30

MIN_PLAYERS = 2
MAX_PLAYERS = 4

# Guild numbers referenced by rules and character abilities
CHURCH = 2
BLACKSMITH = 3
PORT = 5
FARM = 6
TAVERN = 8
MARKET = 9
JEWELRY = 11
MONASTERY = 12
