"""
Messages

Builds the message section of the result file from two sources:

1. Real messages from the document, newest first, each with a legacy
   header line chosen by message type, the sender, and the body with its
   HTML reduced to plain text.
2. Synthesized messages that surface game settings and host configuration
   values that have no other place in the legacy files.

All message text is stored with the legacy reversible transform: every
character is shifted up by 13, line breaks become byte 26.
"""

import logging
import re
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from nu2vgap.binfmt import pack, to_text
from nu2vgap.document import GameDocument
from nu2vgap.records import Message

logger = logging.getLogger(__name__)

# Header lines indexed by Nu message type. Not every type has been observed
# in the wild; the comment is the Nu name of the type.
MESSAGE_TEMPLATES = (
    "(-r0000)<<< Outbound >>>",             # 0 Outbound, should not appear in inbox
    "(-h0000)<<< System >>>",               # 1 System
    "(-s%04d)<<< Terraforming >>>",         # 2 Terraforming
    "(-l%04d)<<< Minefield Laid >>>",       # 3 Minelaying
    "(-m%04d)<<< Mine Sweep >>>",           # 4 Minesweeping
    "(-p%04d)<<< Planetside Message >>>",   # 5 Colony
    "(-f%04d)<<< Combat >>>",               # 6 Combat
    "(-f%04d)<<< Fleet Message >>>",        # 7 Fleet
    "(-s%04d)<<< Ship Message >>>",         # 8 Ship
    "(-n%04d)<<< Intercepted Message >>>",  # 9 Enemy Distress Call
    "(-x0000)<<< Explosion >>>",            # 10 Explosion
    "(-d%04d)<<< Space Dock Message >>>",   # 11 Starbase
    "(-w%04d)<<< Web Mines >>>",            # 12 Web Mines
    "(-y%04d)<<< Meteor >>>",               # 13 Meteors
    "(-z%04d)<<< Sensor Sweep >>>",         # 14 Sensor Sweep
    "(-z%04d)<<< Bio Scan >>>",             # 15 Bio Scan
    "(-e%04d)<<< Distress Call >>>",        # 16 Distress Call
    "(-r%04d)<<< Subspace Message >>>",     # 17 Player
    "(-h0000)<<< Diplomacy >>>",            # 18 Diplomacy
    "(-m%04d)<<< Mine Scan >>>",            # 19 Mine Scan
    "(-9%04d)<<< Captain's Log >>>",        # 20 Dark Sense
    "(-9%04d)<<< Sub Space Message >>>",    # 21 Hiss
)

FALLBACK_TEMPLATE = "(-h0000)<<< Sub Space Message >>>"

LINE_BREAK_BYTE = 26
SHIFT = 13

_WHITESPACE_RE = re.compile(r"\s+", re.ASCII)
_BREAK_RE = re.compile(r" *<br */?> *", re.IGNORECASE)
_TAG_RE = re.compile(r"</?[A-Za-z][^<>]*>")
_PADDED_COORDS_RE = re.compile(r"\( +(\d+, *\d+) +\)")

# A separator is emitted only between two groups that both produced output
SEPARATOR = "\n"

SynthItem = Union[str, Tuple[str, str]]

# (header, document mapping, items)
SETTINGS_MESSAGES: Sequence[Tuple[str, str, Sequence[SynthItem]]] = (
    ("(-h0000)<<< Game Settings (1) >>>", "game", (
        ("name", "Game Name: %s"),
        ("description", "Description: %s"),
        SEPARATOR,
        ("hostdays", "Host Days: %s"),
        ("hosttime", "Host Time: %s"),
        SEPARATOR,
        ("masterplanetid", "Master Planet Id: %s"),
    )),
    ("(-h0000)<<< Game Settings (2) >>>", "settings", (
        ("buildqueueplanetid", "Build Queue Planet: %s"),
        ("turn", "Turn %s"),
        ("victorycountdown", "Victory Countdown: %s"),
        SEPARATOR,
        ("hoststart", "Host started: %s"),
        ("hostcompleted", "Host completed: %s"),
    )),
    ("(-g0000)<<< Host Configuration >>>", "settings", (
        ("cloakfail", "Odds of cloak failure  %s %%"),
        ("maxions", "Ion Storms             %s"),
        ("shipscanrange", "Ships are visible at   %s"),
        ("structuredecayrate", "structure decay        %s"),
        SEPARATOR,
        ("mapwidth", "Map width              %s"),
        ("mapheight", "Map height             %s"),
        ("maxallies", "Maximum allies         %s"),
        ("numplanets", "Number of planets      %s"),
        ("planetscanrange", "Planets are visible at %s"),
    )),
)

# Per-race host configuration arrays: (race key, title, value format)
RACE_CONFIG_MESSAGES: Sequence[Tuple[str, str, str]] = (
    ("freefighters", "Free fighters at starbases", "%3s"),
    ("groundattack", "Ground Attack Kill Ratio", "%3s : 1"),
    ("grounddefense", "Ground Defense Kill Ratio", "%3s : 1"),
    ("miningrate", "Mining rates", "%3s"),
    ("taxrate", "Tax rates", "%3s"),
)

HOST_CONFIG_HEADER = "(-g0000)<<< Host Configuration >>>"


# =============================================================================
# TEXT
# =============================================================================

def format_message_text(text: str) -> str:
    """
    Reduce Nu message HTML to plain text.

    The legacy clients do their own word wrapping, so whitespace runs are
    collapsed and only explicit ``<br>`` breaks are kept.
    """
    text = _WHITESPACE_RE.sub(" ", text)
    text = _BREAK_RE.sub("\n", text)
    text = _TAG_RE.sub("", text)
    # Nu writes coordinates as '( 1234, 5678 )'. Compacting them here, before
    # the location check in render_message, keeps a padded pair from getting
    # a duplicate 'Location:' line; compacting only a copy used to do that
    return _PADDED_COORDS_RE.sub(r"(\1)", text)


def message_value(value: Any) -> str:
    """Document value as message text, with CR and CRLF line ends made LF."""
    return to_text(value).replace("\r\n", "\n").replace("\r", "\n")


def encrypt_message(text: str) -> bytes:
    return bytes(
        LINE_BREAK_BYTE if ch == "\n" else (ord(ch) + SHIFT) & 0xFF
        for ch in text
    )


def decrypt_message(data: bytes) -> str:
    return "".join(
        "\n" if byte == LINE_BREAK_BYTE else chr((byte - SHIFT) & 0xFF)
        for byte in data
    )


# =============================================================================
# REAL MESSAGES
# =============================================================================

def message_header(message: Message) -> str:
    if 0 <= message.messagetype < len(MESSAGE_TEMPLATES):
        template = MESSAGE_TEMPLATES[message.messagetype]
    else:
        template = FALLBACK_TEMPLATE
    return template % message.target if "%" in template else template


def render_message(message: Message) -> str:
    text = "\n\n".join([
        message_header(message),
        format_message_text("From: " + message.headline),
        format_message_text(message.body),
    ])

    # Let the client know the location unless the text already mentions it
    if message.x and message.y:
        location = re.compile(rf"\({message.x}, *{message.y}\)")
        if not location.search(text):
            text += f"\n\nLocation: ({message.x}, {message.y})"
    return text


def real_messages(doc: GameDocument) -> List[str]:
    messages = sorted(doc.messages(), key=lambda m: m.id, reverse=True)
    return [render_message(m) for m in messages]


# =============================================================================
# SYNTHESIZED MESSAGES
# =============================================================================

def synthesize_message(header: str, values: Mapping[str, Any],
                       items: Sequence[SynthItem]) -> Optional[str]:
    """
    Build a message from the fields of ``values`` that are present.

    Returns None if none of the fields is present.
    """
    text = header + "\n\n"
    found = False
    gap = True
    for item in items:
        if isinstance(item, tuple):
            key, fmt = item
            if key in values:
                text += fmt % message_value(values[key]) + "\n"
                found = True
                gap = False
        else:
            if not gap:
                text += item
            gap = True
    return text if found else None


def race_config_message(races: Sequence[Mapping[str, Any]], key: str, title: str,
                        fmt: str) -> Optional[str]:
    text = f"{HOST_CONFIG_HEADER}\n\n{title}\n"
    found = False
    for race in races:
        if key in race and "adjective" in race:
            adjective = message_value(race["adjective"])
            text += "  %-15s" % adjective + fmt % message_value(race[key]) + "\n"
            found = True
    return text if found else None


def synthesized_messages(doc: GameDocument) -> List[str]:
    result = []
    for header, section, items in SETTINGS_MESSAGES:
        text = synthesize_message(header, doc.mapping(section), items)
        if text is not None:
            result.append(text)

    races = doc.items("races")
    for key, title, fmt in RACE_CONFIG_MESSAGES:
        text = race_config_message(races, key, title, fmt)
        if text is not None:
            result.append(text)
    return result


# =============================================================================
# SECTION
# =============================================================================

def build_messages(doc: GameDocument) -> List[bytes]:
    """All messages for the result file, encrypted, in file order."""
    texts = real_messages(doc) + synthesized_messages(doc)
    logger.debug("%d messages", len(texts))
    return [encrypt_message(text) for text in texts]


def encode_message_section(messages: Sequence[bytes], start: int) -> bytes:
    """
    Message directory followed by the message bodies.

    Args:
        messages: Encrypted message bodies
        start: 1-based file position of the section's first byte

    The directory holds, per message, its 1-based file position and length.
    """
    position = start + 2 + 6 * len(messages)
    directory = [pack("<H", len(messages))]
    for body in messages:
        directory.append(pack("<IH", position, len(body)))
        position += len(body)
    return b"".join(directory) + b"".join(messages)
