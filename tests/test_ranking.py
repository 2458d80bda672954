"""
TBURN Voting Power Ranking Tests

Ordering, precision, committee selection, exclusion and the ranking view.
"""

import pytest
from decimal import Decimal

from tburn.constants import WEI_PER_TOKEN
from tburn.exceptions import DuplicateValidator, InvalidValidatorRecord
from tburn.validator import (
    TierKey,
    ValidatorRecord,
    ValidatorStatus,
    VotingPowerRanker,
    rank_validators,
)


def addr(i: int) -> str:
    return f"0x{i:040x}"


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def ranker():
    return VotingPowerRanker()


@pytest.fixture
def thirty_validators():
    """30 validators with distinct stakes, validator i holding (i + 1) * 10,000 tokens."""
    return [
        ValidatorRecord(address=addr(i), name=f"validator-{i}", stake=(i + 1) * 10_000 * WEI_PER_TOKEN)
        for i in range(30)
    ]


# =============================================================================
# ORDERING
# =============================================================================

class TestOrdering:
    """Test voting power ordering."""

    def test_delegation_changes_rank_not_tier(self, ranker):
        a = ValidatorRecord(address=addr(0xA), stake=2_000_000 * WEI_PER_TOKEN, delegated_stake=0)
        b = ValidatorRecord(address=addr(0xB), stake=1_500_000 * WEI_PER_TOKEN,
                            delegated_stake=600_000 * WEI_PER_TOKEN)

        ranking = ranker.rank([a, b])

        assert [v.address for v in ranking] == [addr(0xB), addr(0xA)]
        assert ranking.get(addr(0xB)).voting_power_tokens == Decimal(2_100_000)
        assert ranking.get(addr(0xA)).tier == TierKey.GENESIS
        # Tier follows direct stake (1.5M), not voting power
        assert ranking.get(addr(0xB)).tier == TierKey.GENESIS

    def test_tier_uses_direct_stake_only(self, ranker):
        record = ValidatorRecord(address=addr(1), stake=100_000 * WEI_PER_TOKEN,
                                 delegated_stake=5_000_000 * WEI_PER_TOKEN)
        ranked = ranker.rank([record]).get(addr(1))
        assert ranked.tier == TierKey.COMMUNITY
        assert ranked.voting_power == 5_100_000 * WEI_PER_TOKEN

    def test_sorted_descending(self, ranker, thirty_validators):
        ranking = ranker.rank(reversed(thirty_validators))
        powers = [v.voting_power for v in ranking]
        assert powers == sorted(powers, reverse=True)
        assert [v.rank for v in ranking] == list(range(1, 31))

    def test_ties_broken_by_address(self, ranker):
        records = [
            ValidatorRecord(address=addr(3), stake=100),
            ValidatorRecord(address=addr(1), stake=100),
            ValidatorRecord(address=addr(2), stake=100),
        ]
        ranking = ranker.rank(records)
        assert [v.address for v in ranking] == [addr(1), addr(2), addr(3)]

    def test_deterministic(self, ranker, thirty_validators):
        first = ranker.rank(thirty_validators)
        second = ranker.rank(list(reversed(thirty_validators)))
        assert first.to_dict() == second.to_dict()

    def test_single_unit_difference(self, ranker):
        base = 5_000_000 * WEI_PER_TOKEN
        ranking = ranker.rank([
            ValidatorRecord(address=addr(1), stake=base),
            ValidatorRecord(address=addr(2), stake=base + 1),
        ])
        assert ranking.validators[0].address == addr(2)
        assert ranking.validators[0].voting_power - ranking.validators[1].voting_power == 1

    def test_string_stakes(self, ranker):
        ranking = ranker.rank([
            ValidatorRecord(address=addr(1), stake=str(3 * WEI_PER_TOKEN)),
            ValidatorRecord(address=addr(2), stake=str(2 * WEI_PER_TOKEN), delegated_stake=str(2 * WEI_PER_TOKEN)),
        ])
        assert ranking.validators[0].address == addr(2)
        assert ranking.validators[0].stake == 2 * WEI_PER_TOKEN


# =============================================================================
# COMMITTEE
# =============================================================================

class TestCommittee:
    """Test top-21 committee selection."""

    def test_top_21_of_30(self, ranker, thirty_validators):
        ranking = ranker.rank(thirty_validators)
        assert len(ranking.committee) == 21
        assert ranking.committee_order == tuple(v.address for v in ranking.validators[:21])
        twenty_second = ranking.validators[21]
        assert twenty_second.rank == 22
        assert not ranking.is_committee_member(twenty_second.address)

    @pytest.mark.parametrize("count", [0, 1, 20, 21, 22, 30])
    def test_committee_size(self, ranker, count):
        records = [ValidatorRecord(address=addr(i), stake=i + 1) for i in range(count)]
        assert len(ranker.rank(records).committee) == min(21, count)

    def test_custom_committee_size(self, thirty_validators):
        ranking = rank_validators(thirty_validators, committee_size=5)
        assert len(ranking.committee) == 5

    def test_committee_voting_power(self, ranker, thirty_validators):
        ranking = ranker.rank(thirty_validators)
        expected = sum(v.voting_power for v in ranking.validators[:21])
        assert ranking.committee_voting_power == expected


# =============================================================================
# EDGE CASES
# =============================================================================

class TestEdgeCases:
    """Test empty, duplicate and invalid input."""

    def test_empty_input(self, ranker):
        ranking = ranker.rank([])
        assert len(ranking) == 0
        assert ranking.committee == frozenset()
        assert ranking.total_voting_power == 0

    def test_duplicate_address(self, ranker):
        with pytest.raises(DuplicateValidator):
            ranker.rank([
                ValidatorRecord(address=addr(1), stake=1),
                ValidatorRecord(address=addr(1), stake=2),
            ])

    def test_duplicate_address_case_insensitive(self, ranker):
        upper = "0x" + "AB" * 20
        with pytest.raises(DuplicateValidator):
            ranker.rank([
                ValidatorRecord(address=upper, stake=1),
                ValidatorRecord(address=upper.lower(), stake=2),
            ])

    def test_invalid_stake_excluded(self, ranker):
        ranking = ranker.rank([
            ValidatorRecord(address=addr(1), stake="not-a-number"),
            ValidatorRecord(address=addr(2), stake=10),
            ValidatorRecord(address=addr(3), stake=-5),
        ])
        assert [v.address for v in ranking] == [addr(2)]
        assert [a for a, _ in ranking.excluded] == [addr(1), addr(3)]

    def test_payload_dicts(self, ranker):
        ranking = ranker.rank([
            {"address": addr(1), "stake": "100", "delegatedStake": "50", "uptime": 9950},
            {"address": "bad", "stake": "1"},
        ])
        assert len(ranking) == 1
        assert ranking.get(addr(1)).voting_power == 150
        assert ranking.get(addr(1)).percent("uptime") == Decimal("99.5")
        assert ranking.excluded[0][0] == "bad"

    @pytest.mark.parametrize("field", [
        "totalBlocks", "missedBlocks", "delegators", "uptime", "aiTrustScore", "commission",
    ])
    def test_negative_counters_rejected(self, field):
        with pytest.raises(InvalidValidatorRecord):
            ValidatorRecord.from_dict({"address": addr(1), "stake": "100", field: -1})

    def test_negative_counter_payload_excluded(self, ranker):
        ranking = ranker.rank([
            {"address": addr(1), "stake": "100", "missedBlocks": -3},
            {"address": addr(2), "stake": "100", "missedBlocks": "0"},
        ])
        assert [v.address for v in ranking] == [addr(2)]
        assert ranking.excluded[0][0] == addr(1)


# =============================================================================
# RANKING VIEW
# =============================================================================

class TestRankingView:
    """Test Ranking helpers."""

    def test_voting_power_share(self, ranker):
        ranking = ranker.rank([
            ValidatorRecord(address=addr(1), stake=300),
            ValidatorRecord(address=addr(2), stake=100),
        ])
        assert ranking.voting_power_share(addr(1)) == Decimal("0.75")
        assert ranking.voting_power_share(addr(99)) == 0

    def test_voting_power_share_empty(self, ranker):
        assert ranker.rank([]).voting_power_share(addr(1)) == 0

    def test_by_tier(self, ranker):
        ranking = ranker.rank([
            ValidatorRecord(address=addr(1), stake=1_000_000 * WEI_PER_TOKEN),
            ValidatorRecord(address=addr(2), stake=250_000 * WEI_PER_TOKEN),
        ])
        assert [v.address for v in ranking.by_tier(TierKey.GENESIS)] == [addr(1)]
        assert ranking.by_tier(TierKey.PIONEER) == ()

    def test_to_dict(self, ranker):
        ranking = ranker.rank([
            ValidatorRecord(address=addr(1), stake=WEI_PER_TOKEN, status=ValidatorStatus.JAILED),
        ])
        data = ranking.to_dict()
        entry = data["validators"][0]
        assert entry["votingPower"] == str(WEI_PER_TOKEN)
        assert entry["status"] == "jailed"
        assert entry["rank"] == 1
        assert data["committee"] == [addr(1)]
