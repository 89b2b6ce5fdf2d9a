"""
Pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from nu2vgap.config import ConverterConfig
from nu2vgap.document import GameDocument
from nu2vgap.parser import dump


# =============================================================================
# DOCUMENT FIXTURES
# =============================================================================

def make_root() -> dict:
    """
    A small but complete Nu result.

    The current player has internal id 2 and plays race 3; player 3 (race 7)
    is the enemy.
    """
    return {
        "success": True,
        "savekey": "KEY",
        "rst": {
            "player": {"id": 2, "raceid": 3, "savekey": "KEY"},
            "players": [
                {"id": 1, "raceid": 1},
                {"id": 2, "raceid": 3},
                {"id": 3, "raceid": 7},
            ],
            "settings": {
                "name": "Test Game",
                "turn": 12,
                "hoststart": "8/12/2011 9:00:13 PM",
                "mapwidth": 2000,
                "mapheight": 2000,
            },
            "game": {
                "name": "Test Game",
                "description": "A game for testing",
                "hostdays": "MTWTFSS",
            },
            "races": [
                {"id": 1, "adjective": "Fed", "freefighters": 0, "taxrate": 100},
                {"id": 3, "adjective": "Bird", "freefighters": 0, "taxrate": 100},
            ],
            "ships": [
                {
                    "id": 5, "ownerid": 2, "name": "Scout", "friendlycode": "abc",
                    "x": 1000, "y": 1000, "targetx": 1010, "targety": 1000,
                    "warp": 9, "hullid": 15, "engineid": 7, "mission": -1,
                    "mass": 120, "crew": 10, "neutronium": 50,
                },
                {
                    "id": 7, "ownerid": 3, "name": "Enemy",
                    "x": 1200, "y": 1100, "warp": 5, "hullid": 20,
                    "heading": 90, "mass": 300,
                },
            ],
            "planets": [
                {
                    "id": 1, "ownerid": 2, "name": "Home", "friendlycode": "xyz",
                    "x": 1000, "y": 1000, "temp": 50, "mines": 10, "clans": 100,
                },
                {
                    "id": 2, "ownerid": 0, "name": "Unknown", "friendlycode": "???",
                    "x": 1500, "y": 1500, "temp": -1,
                },
                {
                    "id": 3, "ownerid": 3, "name": "Foreign", "friendlycode": "???",
                    "x": 1200, "y": 1100, "temp": 20, "clans": 5,
                },
            ],
            "starbases": [
                {
                    "id": 100, "planetid": 1, "defense": 50, "fighters": 20,
                    "isbuilding": True, "buildhullid": 16, "buildengineid": 7,
                },
                {"id": 101, "planetid": 3, "defense": 10},
            ],
            "stock": [
                {"starbaseid": 100, "stocktype": 2, "stockid": 3, "amount": 7},
                {"starbaseid": 100, "stocktype": 1, "stockid": 16, "amount": 2},
                {"starbaseid": 101, "stocktype": 2, "stockid": 3, "amount": 99},
            ],
            "racehulls": [15, 16, 17],
            "messages": [
                {
                    "id": 1, "messagetype": 2, "headline": "Home",
                    "body": "Terraformed<br/>done", "target": 1,
                    "x": 1000, "y": 1000,
                },
                {
                    "id": 3, "messagetype": 99, "headline": "Unknown",
                    "body": "Strange", "target": 0, "x": 0, "y": 0,
                },
            ],
            "scores": [
                {
                    "ownerid": 2, "turn": 12, "planets": 4, "capitalships": 2,
                    "freighters": 1, "starbases": 1, "militaryscore": 500,
                    "inventoryscore": 300, "prioritypoints": 9,
                },
            ],
            "ionstorms": [
                {
                    "id": 1, "x": 500, "y": 600, "voltage": 120, "heading": 45,
                    "warp": 6, "radius": 80, "isgrowing": True,
                },
            ],
            "minefields": [
                {"id": 4, "ownerid": 3, "x": 900, "y": 900, "units": 1000,
                 "isweb": False, "infoturn": 12},
                {"id": 5, "ownerid": 3, "x": 100, "y": 100, "units": 50,
                 "isweb": True, "infoturn": 10},
            ],
            "vcrs": [
                {
                    "seed": 42, "battletype": 0,
                    "left": {"name": "Scout", "objectid": 5, "raceid": 3,
                             "hullid": 15, "mass": 120, "fighters": 10,
                             "shield": 100},
                    "right": {"name": "Enemy", "objectid": 7, "raceid": 7,
                              "hullid": 20, "torpedoid": 3, "torpedos": 12,
                              "mass": 300, "temperature": 50, "shield": 80},
                },
            ],
            "beams": [
                {"id": 1, "name": "Laser", "cost": 1, "damage": 3},
            ],
            "torpedos": [
                {"id": 1, "name": "Mark 1 Photon", "torpedocost": 1},
            ],
            "engines": [
                {"id": 1, "name": "StarDrive 1", "warp1": 100},
            ],
            "hulls": [
                {"id": 15, "name": "Small Freighter", "cost": 10, "cancloak": False},
                {"id": 16, "name": "Cloaker", "cost": 80, "cancloak": True},
            ],
        },
    }


@pytest.fixture
def nu_root():
    """Fresh value tree of a Nu result."""
    return make_root()


@pytest.fixture
def nu_doc(nu_root):
    """The sample result as a GameDocument."""
    return GameDocument(nu_root)


@pytest.fixture
def nu_file(tmp_path, nu_root):
    """The sample result written as a document file."""
    path = tmp_path / "c2rst.txt"
    path.write_bytes(dump(nu_root).encode("latin-1"))
    return path


# =============================================================================
# CONFIG FIXTURES
# =============================================================================

@pytest.fixture
def root_dir(tmp_path):
    """Empty game directory for baseline files."""
    path = tmp_path / "root"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path):
    path = tmp_path / "out"
    path.mkdir()
    return path


@pytest.fixture
def config(tmp_path, root_dir, output_dir):
    """Config pointing at temporary directories, ignoring user config files."""
    return ConverterConfig(tmp_path / "missing.yaml").override(
        root_dir=str(root_dir), output_dir=str(output_dir),
    )
