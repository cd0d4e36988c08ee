"""Tests for MapRegistry lookups and traversal."""

import pytest

from wayto.exceptions import EdgeNotFoundError
from wayto.model import Direction, Script
from wayto.table import load_registry


class TestRegistryLookup:
    """Origin tables with global pool fallback."""

    def test_origin_lookup(self, registry):
        assert registry.lookup("28908", "28907") == Direction("south")
        assert registry.lookup(29033, 29034) == Direction("northeast")

    def test_global_pool_fallback(self, registry):
        transition = registry.lookup("29033", "31558")
        assert isinstance(transition, Script)
        assert transition.action_types() == ["REPEAT", "SET_EXTERNAL_VAR"]

    def test_origin_entry_wins_over_pool(self, registry):
        # "30716" exists in both 28908's table and the pool
        assert registry.lookup("28908", "30716") is registry.get_table("28908").lookup("30716")

    def test_unknown_origin_still_reaches_pool(self, registry):
        assert isinstance(registry.lookup("1", "31558"), Script)

    def test_missing_edge_raises(self, registry):
        with pytest.raises(EdgeNotFoundError) as exc_info:
            registry.lookup("28908", "12345")
        assert exc_info.value.origin == "28908"
        assert exc_info.value.target_id == "12345"

    def test_get_returns_none(self, registry):
        assert registry.get("28908", "12345") is None

    def test_lookup_foreign_has_no_pool_fallback(self, registry):
        assert registry.lookup_foreign(7, "3668") == Direction("go gate")
        with pytest.raises(EdgeNotFoundError):
            registry.lookup_foreign("7", "31558")

    def test_lookup_foreign_unknown_map(self, registry):
        with pytest.raises(EdgeNotFoundError, match="unknown map"):
            registry.lookup_foreign("404", "3668")

    def test_round_trip_for_every_origin(self, wayto_data, registry):
        for origin, block in wayto_data.items():
            if isinstance(block, str):
                assert registry.global_pool.lookup(origin).text == block
                continue
            for target_id, text in block["wayto"].items():
                transition = registry.lookup(origin, target_id)
                assert transition is registry.get_table(origin).lookup(target_id)
                assert transition.text == text
                assert str(transition) == text

    def test_origins_and_len(self, registry):
        assert sorted(registry.origins()) == ["28908", "29033", "7"]
        assert len(registry) == 3
        assert "7" in registry
        assert 7 in registry
        assert len(registry.global_pool) == 2


class TestRegistryRooms:
    """Room and location queries over mapdb exports."""

    def test_locations(self, mapdb_rooms):
        registry = load_registry(mapdb_rooms)
        assert registry.locations() == ["Duskruin", "Wehnimer's Landing"]

    def test_rooms_by_location(self, mapdb_rooms):
        registry = load_registry(mapdb_rooms)
        rooms = registry.rooms_by_location("Duskruin")
        assert [room.id for room in rooms] == ["28908", "28907"]

    def test_table_keeps_room_and_timeto(self, mapdb_rooms):
        registry = load_registry(mapdb_rooms)
        table = registry.get_table(28908)
        assert table.room.name == "[Duskruin Arena, Entrance]"
        assert table.timeto("26905") == 30


class TestRegistryTraverse:
    """Lookup plus execution in one call."""

    @pytest.mark.asyncio
    async def test_traverse_cross_map_call(self, registry, session):
        result = await registry.traverse("28908", "3668", session)
        assert result.success
        assert session.sent == ["go gate"]

    @pytest.mark.asyncio
    async def test_traverse_missing_edge_raises(self, registry, session):
        with pytest.raises(EdgeNotFoundError):
            await registry.traverse("28908", "12345", session)
