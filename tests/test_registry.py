"""Token registry: launch, lookups, enumeration."""

import json

import pytest

from launchpad import events as ev
from launchpad.errors import EmptyName, EmptySymbol, InvalidAssetReference
from launchpad.launch_types import LaunchState
from launchpad.registry import TokenRegistry

from conftest import BOB, CREATOR, NOW, SMALL_PARAMS


@pytest.fixture
def registry():
    return TokenRegistry(SMALL_PARAMS, custody="launchpad", clock=lambda: NOW)


class TestCreateToken:

    def test_new_record(self, registry):
        record = registry.create_token("Doge", "DOGE", "ipfs://doge", CREATOR)

        assert record.asset_id.startswith("0x")
        assert len(record.asset_id) == 42
        assert record.creator == CREATOR
        assert record.held_reserve == 300_000
        assert record.max_supply == 1_000_000
        assert record.current_supply == 0
        assert record.completed is False
        assert record.unlocked is False
        assert record.creation_timestamp == NOW
        assert record.state == LaunchState.ACTIVE

    def test_reserve_minted_to_custody(self, registry):
        record = registry.create_token("Doge", "DOGE", "", CREATOR)
        ledger = registry.ledger(record.asset_id)

        assert ledger.balance_of("launchpad") == 300_000
        assert ledger.total_supply == 300_000
        assert ledger.minter == "launchpad"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name(self, registry, name):
        with pytest.raises(EmptyName):
            registry.create_token(name, "DOGE", "", CREATOR)
        assert registry.get_all_tokens() == []

    def test_empty_symbol(self, registry):
        with pytest.raises(EmptySymbol):
            registry.create_token("Doge", "", "", CREATOR)

    def test_identical_launches_get_distinct_ids(self, registry):
        a = registry.create_token("Doge", "DOGE", "", CREATOR)
        b = registry.create_token("Doge", "DOGE", "", CREATOR)
        assert a.asset_id != b.asset_id


class TestLookups:

    def test_unknown_asset(self, registry):
        with pytest.raises(InvalidAssetReference):
            registry.get_token_info("0xnope")
        with pytest.raises(InvalidAssetReference):
            registry.ledger("0xnope")

    def test_get_all_tokens_in_creation_order(self, registry):
        ids = [registry.create_token(f"T{i}", f"T{i}", "", CREATOR).asset_id
               for i in range(3)]
        assert registry.get_all_tokens() == ids

    def test_token_info_is_a_copy(self, registry):
        record = registry.create_token("Doge", "DOGE", "", CREATOR)
        info = registry.get_token_info(record.asset_id)
        info.current_supply = 999
        assert registry.get(record.asset_id).current_supply == 0

    def test_list_tokens_by_creator(self, registry):
        registry.create_token("Doge", "DOGE", "", CREATOR)
        registry.create_token("Pepe", "PEPE", "", BOB)
        assert [r.symbol for r in registry.list_tokens(creator=BOB)] == ["PEPE"]
        assert len(registry.list_tokens(state=LaunchState.ACTIVE)) == 2
        assert registry.list_tokens(state=LaunchState.COMPLETED) == []

    def test_export_tokens(self, registry):
        registry.create_token("Doge", "DOGE", "", CREATOR)
        data = json.loads(registry.export_tokens())
        assert data["tokens"][0]["symbol"] == "DOGE"
        assert data["tokens"][0]["state"] == "active"


class TestEngineLaunch:

    def test_launch_emits_event(self, engine, asset):
        event = engine.events.last(ev.LAUNCH_CREATED)
        assert event.data == {
            "asset_id": asset,
            "name": "Doge",
            "symbol": "DOGE",
            "metadata": "ipfs://doge",
            "creator": CREATOR,
        }

    def test_failed_launch_leaves_no_trace(self, engine):
        with pytest.raises(EmptySymbol):
            engine.create_token("Doge", " ", "", caller=CREATOR)
        assert engine.get_all_tokens() == []
        assert engine.events.list(kind=ev.LAUNCH_CREATED) == []
        assert engine.lock.locked is False
