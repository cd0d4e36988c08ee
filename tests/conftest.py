"""Pytest configuration and fixtures."""

import json

import pytest

from wayto.config import reset_settings
from wayto.mock import MockActionContext
from wayto.table import load_registry

GO_TABLE_SCRIPT = (
    ';e table = "ghost"; fput "go #{table} table" if dothistimeout("go #{table} table", 25, '
    "/You (?:and your group )?head over to|waves.*you.*(?:invites|inviting) you(?: and your group)? "
    "to (?:join|come sit at)/) =~ /inviting you|invites you/"
)

PORTMASTER_SCRIPT = (
    ";e multifput 'ask portmaster about travel 2','ask portmaster about travel 2';"
    "waitfor 'A crew member escorts you off the ship.'"
)

DUSKRUIN_SCRIPT = ';e 2.times{fput "quest transport duskruin"};UserVars.mapdb_duskruin_origin = 28908;'

WIZARD_GUILD_SCRIPT = (
    ";e fput 'speak'; language = /You are currently speaking (.*?)\\./.match(get).captures.first "
    "until language;; fput('speak wizard') unless language == 'Guildspeak'; "
    "fput('unhide') if hidden? or invisible?; move 'say ::portal wizard'; "
    "fput('speak ' + language.to_s) unless language == 'Guildspeak'"
)

ROGUE_GUILD_SCRIPT = (
    ";e fput 'look tool'; sleep 0.5; fput 'pull hoe'; waitrt?; fput 'pull rake'; waitrt?; "
    "fput 'pull shovel'; waitrt?; move 'go panel'"
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Give every test fresh settings that never touch the user's cache."""
    monkeypatch.setenv("WAYTO_ENV", "test")
    monkeypatch.setenv("WAYTO_CACHE_PATH", str(tmp_path / "cache"))
    monkeypatch.setenv("WAYTO_DISABLE_CONSOLE_LOGGING", "1")
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def wayto_data():
    """Origin blocks modelled on real mapdb rooms, plus global scripts."""
    return {
        "28908": {
            "wayto": {
                "28813": "southwest",
                "28907": "south",
                "28935": "go wagon",
                "3668": ";e Map[7].wayto['3668'].call;",
                "30716": ";e true",
                "26905": DUSKRUIN_SCRIPT,
            },
            "timeto": {"28813": 0.2, "28907": 0.2, "28935": None, "3668": 15, "30716": 2, "26905": 30},
        },
        "29033": {
            "wayto": {
                "29034": "northeast",
                "28998": "go ladder",
                "29004": GO_TABLE_SCRIPT,
                "11756": PORTMASTER_SCRIPT,
                "29773": WIZARD_GUILD_SCRIPT,
                "18348": ROGUE_GUILD_SCRIPT,
                "23265": ";e move 'northeast'; waitrt?",
            }
        },
        "7": {"wayto": {"3668": "go gate"}},
        "30716": ";e true",
        "31558": ';e 2.times{fput "quest transport ebon gate"};UserVars.mapdb_ebon_gate_origin = 28908;',
    }


@pytest.fixture
def registry(wayto_data):
    return load_registry(wayto_data)


@pytest.fixture
def mapdb_rooms():
    """Room records in mapdb export format."""
    return [
        {
            "id": 28908,
            "title": ["[Duskruin Arena, Entrance]"],
            "location": "Duskruin",
            "wayto": {"28907": "south", "26905": DUSKRUIN_SCRIPT},
            "timeto": {"28907": 0.2, "26905": 30},
        },
        {
            "id": 28907,
            "title": ["[Duskruin Arena, Courtyard]"],
            "location": "Duskruin",
            "wayto": {"28908": "north"},
            "timeto": {"28908": 0.2},
        },
        {
            "id": 3668,
            "title": ["[Wehnimer's Landing, Town Square]"],
            "location": "Wehnimer's Landing",
            "wayto": {"3669": "east"},
            "timeto": {"3669": 0.2},
        },
    ]


@pytest.fixture
def mapdb_file(tmp_path, mapdb_rooms):
    path = tmp_path / "mapdb.json"
    path.write_text(json.dumps(mapdb_rooms))
    return path


@pytest.fixture
def session():
    """Mock session with nothing queued."""
    return MockActionContext()
