"""Card codes, display names and wire event names"""

from typing import Dict, List

COLORS: Dict[str, str] = {
    'r': 'Red',
    'g': 'Green',
    'b': 'Blue',
    'y': 'Yellow',
    'l': 'Purple',
    't': 'Turquoise',
}

TYPES: Dict[str, str] = {
    'p2': '+2',
    's': 'Reverse',
    'o': 'Skip',
    'cycle': 'Cycle',
    'rand': 'Random',
    'wish': 'Wish',
    'p4wish': '+4 Wish',
}

# Display order of color groups; colorless (wild) cards always come last
COLOR_PRIORITY: List[str] = ['r', 'g', 't', 'b', 'l', 'y']
WILD = ''

# Colors offered when the server asks for a wish
WISH_COLORS: List[str] = ['r', 'g', 'b', 'y']

# Client -> server
JOIN_LOBBY = 'joinLobby'
START_GAME = 'startGame'
REQUEST_INITIAL_CARDS = 'requestInitialCards'
REQUEST_INITIAL_STACK = 'requestInitialStack'
PLAY_CARD = 'playCard'
CARD_REQUEST = 'cardRequest'
WISH_COLOR = 'wishColor'

# Seconds to wait for the wish acknowledgement; older servers never send one
WISH_ACK_TIMEOUT = 5.0

DRAW_LABEL = "Draw Card/s (Draw Amount: {amount})"
