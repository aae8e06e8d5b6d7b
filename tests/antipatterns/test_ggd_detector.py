"""Tests for the Schema.getGlobalDescribe() detector."""

from unittest.mock import MagicMock

from apexlens.antipatterns.detectors import GGDDetector, TraversalContext, traverse
from apexlens.antipatterns.domain import AntipatternType, Severity, SeverityPolicy
from apexlens.ast.domain.enums import ApexNodeType
from apexlens.ast.providers.apex_provider import ApexASTProvider


class TestTraversalContext:
    def test_loop_depth_and_member(self):
        source = "public class C { void m() { while (true) { for (;;) { x(); } } } }"
        root = ApexASTProvider().parse(source, "C").ast_root

        contexts = [ctx for node, ctx in traverse(root) if node.node_type == ApexNodeType.CALL]
        assert contexts == [TraversalContext(member_name="m", loop_depth=2)]

    def test_nested_class_resets_scope(self):
        source = "public class Outer { void m() { for (;;) { } } class Inner { void n() { y(); } } }"
        root = ApexASTProvider().parse(source, "Outer").ast_root

        call_context = next(ctx for node, ctx in traverse(root) if node.node_type == ApexNodeType.CALL)
        assert call_context.member_name == "n"
        assert not call_context.in_loop


class TestGGDDetector:
    def test_type(self):
        assert GGDDetector().get_antipattern_type() == AntipatternType.GGD

    def test_call_in_loop_is_critical(self):
        source = "class C { void m(){ for(;;){ Schema.getGlobalDescribe(); } } }"
        detections = GGDDetector().detect("C", source)

        assert len(detections) == 1
        detection = detections[0]
        assert detection.unit_name == "C"
        assert detection.member_name == "m"
        assert detection.line_number == 1
        assert detection.severity == Severity.CRITICAL
        assert detection.severity_source is None

    def test_in_loop_and_top_level_calls(self, ggd_source):
        detections = GGDDetector().detect("AccountService", ggd_source)

        assert [(d.line_number, d.member_name, d.severity) for d in detections] == [
            (4, "refresh", Severity.CRITICAL),
            (9, "describeAll", Severity.MAJOR),
        ]
        assert detections[0].snippet_before == (
            "Schema.SObjectType t = Schema.getGlobalDescribe().get(name);"
        )

    def test_matching_is_case_insensitive(self):
        source = "class C { void m() { Map<String, SObjectType> d = SCHEMA.GetGlobalDescribe(); } }"
        assert len(GGDDetector().detect("C", source)) == 1

    def test_system_qualified_call(self):
        source = "class C { void m() { System.Schema.getGlobalDescribe(); } }"
        assert len(GGDDetector().detect("C", source)) == 1

    def test_other_receivers_are_ignored(self):
        source = """class C {
    void m() {
        Util.getGlobalDescribe();
        getGlobalDescribe();
        // Schema.getGlobalDescribe();
        String s = 'Schema.getGlobalDescribe()';
    }
}"""
        assert GGDDetector().detect("C", source) == []

    def test_custom_severity_policy(self):
        detector = GGDDetector(severity_policy=SeverityPolicy(in_loop=Severity.HIGH, baseline=Severity.LOW))
        detections = detector.detect("C", "class C { void m() { Schema.getGlobalDescribe(); } }")
        assert detections[0].severity == Severity.LOW

    def test_constructor_is_the_member(self):
        source = "public class C { public C() { Schema.getGlobalDescribe(); } }"
        assert GGDDetector().detect("C", source)[0].member_name == "C"

    def test_field_initializer_has_no_member(self):
        source = "public class C { static Map<String, Schema.SObjectType> gd = Schema.getGlobalDescribe(); }"
        detections = GGDDetector().detect("C", source)
        assert len(detections) == 1
        assert detections[0].member_name is None

    def test_parse_failure_yields_no_findings(self):
        assert GGDDetector().detect("C", "class C { void m() { Schema.getGlobalDescribe(); ") == []

    def test_statement_running_off_the_end_of_input(self):
        source = "class C { void m(){ for(;;){ Schema.getGlobalDescribe(); } } }\nreturn"
        detections = GGDDetector().detect("C", source)

        assert [d.severity for d in detections] == [Severity.CRITICAL]

    def test_bare_return_yields_no_findings(self):
        assert GGDDetector().detect("A", "return") == []

    def test_deeply_nested_calls_yield_no_findings(self):
        nested = "f(" * 5000 + "1" + ")" * 5000
        source = "class C { void m() { Schema.getGlobalDescribe(); x = " + nested + "; } }"
        assert GGDDetector().detect("C", source) == []


class ExplodingDetector(GGDDetector):
    def detect_ast(self, unit_name, source, lines, ast_root):
        raise RuntimeError("visitor bug")


class TestDetectorFailure:
    def test_detection_error_yields_no_findings(self, ggd_source):
        assert ExplodingDetector().detect("AccountService", ggd_source) == []

    def test_provider_error_yields_no_findings(self, ggd_source):
        provider = MagicMock(spec=ApexASTProvider)
        provider.parse.side_effect = ValueError("broken")
        assert GGDDetector(provider=provider).detect("AccountService", ggd_source) == []
