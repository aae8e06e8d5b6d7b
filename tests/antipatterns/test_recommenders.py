"""Tests for recommenders and the fix-instruction loader."""

import pytest

from apexlens.antipatterns.domain import AntipatternType, DetectedAntipattern, Severity
from apexlens.antipatterns.recommenders import (
    GGDRecommender,
    SOQLNoWhereLimitRecommender,
    SOQLUnusedFieldsRecommender,
)
from apexlens.antipatterns.resources.loader import FixInstructionLoader, get_default_loader
from apexlens.shared.domain.exceptions import ConfigurationError


def _unused_detection(query, unused, original):
    return DetectedAntipattern(
        unit_name="C",
        member_name="m",
        line_number=3,
        snippet_before=query,
        severity=Severity.MINOR,
        type_metadata={"unusedFields": unused, "originalFields": original},
    )


class TestFixInstructionLoader:
    def test_packaged_instructions(self):
        loader = FixInstructionLoader()
        instructions = loader.load()

        assert set(instructions) == {t.value for t in AntipatternType}
        assert loader.get(AntipatternType.GGD).version == "1.2"
        assert "getGlobalDescribe" in loader.get(AntipatternType.GGD).instruction

    def test_load_is_cached(self):
        loader = FixInstructionLoader()
        assert loader.load() is loader.load()

    def test_default_loader_is_shared(self):
        assert get_default_loader() is get_default_loader()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            FixInstructionLoader(tmp_path / "missing.yaml").load()

    def test_missing_mapping(self, tmp_path):
        path = tmp_path / "instructions.yaml"
        path.write_text("other: 1\n")
        with pytest.raises(ConfigurationError, match="no 'instructions' mapping"):
            FixInstructionLoader(path).load()

    def test_missing_type(self, tmp_path):
        path = tmp_path / "instructions.yaml"
        path.write_text("instructions:\n  GGD:\n    version: '1'\n    instruction: fix it\n")
        loader = FixInstructionLoader(path)

        assert loader.get(AntipatternType.GGD).instruction == "fix it"
        with pytest.raises(ConfigurationError) as exc_info:
            loader.get(AntipatternType.SOQL_NO_WHERE_LIMIT)
        assert exc_info.value.context["antipattern_type"] == "SOQL_NO_WHERE_LIMIT"

    def test_recommender_fails_at_construction(self, tmp_path):
        path = tmp_path / "instructions.yaml"
        path.write_text("instructions: {}\n")
        with pytest.raises(ConfigurationError):
            GGDRecommender(FixInstructionLoader(path))


class TestInstructionRecommenders:
    @pytest.mark.parametrize(
        "recommender_cls,antipattern_type",
        [
            (GGDRecommender, AntipatternType.GGD),
            (SOQLNoWhereLimitRecommender, AntipatternType.SOQL_NO_WHERE_LIMIT),
            (SOQLUnusedFieldsRecommender, AntipatternType.SOQL_UNUSED_FIELDS),
        ],
    )
    def test_instruction_is_stable(self, recommender_cls, antipattern_type):
        recommender = recommender_cls()

        assert recommender.get_antipattern_type() == antipattern_type
        assert recommender.get_fix_instruction()
        assert recommender.get_fix_instruction() == recommender.get_fix_instruction()
        assert recommender.get_fix_instruction() == get_default_loader().get(antipattern_type).instruction


class TestSOQLUnusedFieldsRecommender:
    @pytest.fixture
    def recommender(self):
        return SOQLUnusedFieldsRecommender()

    def test_generates_trimmed_query(self, recommender):
        fixed = recommender.generate_fixed_query(
            "SELECT Id, Name, Phone FROM Account WHERE Name != null",
            ["Phone"],
            ["Id", "Name", "Phone"],
        )
        assert fixed == "SELECT Id, Name FROM Account WHERE Name != null"

    def test_refuses_nested_queries(self, recommender):
        query = "SELECT Id, Name, (SELECT Id FROM Contacts) FROM Account"
        assert recommender.generate_fixed_query(query, ["Name"], ["Id", "Name"]) == ""

    def test_refuses_removing_all_fields(self, recommender):
        assert recommender.generate_fixed_query("SELECT Name FROM Account", ["Name"], ["Name"]) == ""

    def test_recommend_fills_snippet_after(self, recommender):
        detections = [
            _unused_detection("SELECT Id, Name, Phone FROM Account", ["Phone"], ["Id", "Name", "Phone"]),
            _unused_detection("SELECT Id, Name, (SELECT Id FROM Contacts) FROM Account", ["Name"], ["Id", "Name"]),
        ]
        result = recommender.recommend(detections)

        assert result.antipattern_type == AntipatternType.SOQL_UNUSED_FIELDS
        assert result.fix_instruction == recommender.get_fix_instruction()
        assert [d.snippet_after for d in result.detected_instances] == ["SELECT Id, Name FROM Account", ""]
        # Inputs are left untouched
        assert detections[0].snippet_after is None

    def test_recommend_without_metadata(self, recommender):
        detection = _unused_detection("SELECT Id FROM Account", [], [])
        detection.type_metadata = None
        result = recommender.recommend([detection])
        assert result.detected_instances[0].snippet_after == ""
