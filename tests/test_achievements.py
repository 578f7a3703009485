from idle_miner.domain.achievements import check_and_grant


def test_asset_milestones(make_player):
    player = make_player(assets={"gpu_miner": 50, "asic_farm": 9})
    updated, granted = check_and_grant(player)
    assert granted == ["gpu_miner_10", "gpu_miner_50"]
    assert updated.achievements == granted


def test_granting_is_idempotent(make_player):
    player, _ = check_and_grant(make_player(assets={"gpu_miner": 100}))
    again, granted = check_and_grant(player)
    assert granted == []
    assert again is player


def test_earnings_upgrades_and_prestige_milestones(make_player):
    player = make_player(
        total_earned=2_000_000,
        upgrades={"faster_internet": 3, "click_upgrade": 2},
        prestige_points=5,
    )
    _, granted = check_and_grant(player)
    assert granted == [
        "earned_1000",
        "earned_1000000",
        "upgrades_5",
        "prestige_1",
        "prestige_5",
    ]


def test_held_achievements_are_kept(make_player):
    player = make_player(achievements=["prestige_10"], assets={"mining_pool": 10})
    updated, granted = check_and_grant(player)
    assert granted == ["mining_pool_10"]
    assert updated.achievements == ["prestige_10", "mining_pool_10"]


def test_nothing_to_grant_for_new_player(make_player):
    player = make_player()
    updated, granted = check_and_grant(player)
    assert granted == []
    assert updated.achievements == []
