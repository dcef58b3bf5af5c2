"""Level computation tests. Titles must match the rewards center labels."""

from wastewise.users.levels import LEVEL_THRESHOLDS, compute_level


class TestLevelComputation:
    def test_level_1_at_zero_points(self):
        result = compute_level(0)
        assert result["level"] == 1
        assert result["title"] == "Eco Starter"
        assert result["points_to_next"] == 100

    def test_level_boundary_99_points(self):
        """99 points is still level 1."""
        result = compute_level(99)
        assert result["level"] == 1
        assert result["points_to_next"] == 1

    def test_level_2_at_100_points(self):
        result = compute_level(100)
        assert result["level"] == 2
        assert result["title"] == "Green Helper"
        assert result["next_title"] == "Recycling Ranger"

    def test_level_4_mid_range(self):
        result = compute_level(2000)
        assert result["level"] == 4
        assert result["title"] == "Eco Warrior"
        assert result["points_to_next"] == 3000

    def test_max_level(self):
        result = compute_level(20000)
        assert result["level"] == 6
        assert result["title"] == "Earth Guardian"
        assert result["next_level"] == 6
        assert result["points_to_next"] == 0

    def test_thresholds_increase(self):
        cumulative = [t["cumulative"] for t in LEVEL_THRESHOLDS]
        assert cumulative == sorted(cumulative)
        assert len(set(cumulative)) == len(cumulative)
