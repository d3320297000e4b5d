"""Tests for the read-only eligibility walk."""
import pytest

from react_jitter.analyzer.subtree import SubtreeAnalyzer, callee_name


def _body(parser, find_node, source, name):
    tree = parser.parse_source(source)
    return find_node(tree.root_node, 'function_declaration', name).child_by_field_name('body')


class TestSubtreeAnalyzer:

    def test_jsx_element(self, tsx_parser, find_node):
        body = _body(tsx_parser, find_node, "function Foo() { return <div>hi</div>; }", "Foo")
        assert SubtreeAnalyzer().analyze(body)

    def test_self_closing_and_fragment(self, tsx_parser, find_node):
        assert SubtreeAnalyzer().analyze(
            _body(tsx_parser, find_node, "function Foo() { return <br />; }", "Foo"))
        assert SubtreeAnalyzer().analyze(
            _body(tsx_parser, find_node, "function Foo() { return <></>; }", "Foo"))

    def test_hook_call(self, tsx_parser, find_node):
        body = _body(tsx_parser, find_node, "function Foo() { const v = useThing(); return v; }", "Foo")
        assert SubtreeAnalyzer().analyze(body)

    def test_ignored_hook_still_counts(self, tsx_parser, find_node):
        """Ignore lists apply when rewriting, not when deciding eligibility."""
        body = _body(tsx_parser, find_node, "function Foo() { const [a] = useState(0); return a; }", "Foo")
        assert SubtreeAnalyzer().analyze(body)

    def test_plain_function(self, tsx_parser, find_node):
        body = _body(tsx_parser, find_node, "function Foo() { return 1; }", "Foo")
        assert not SubtreeAnalyzer().analyze(body)

    def test_member_call_is_not_a_hook(self, tsx_parser, find_node):
        body = _body(tsx_parser, find_node, "function Foo() { return React.useThing(); }", "Foo")
        assert not SubtreeAnalyzer().analyze(body)

    @pytest.mark.parametrize("inner", [
        "const cb = () => useThing();",
        "const cb = function () { return <div />; };",
        "function helper() { return useThing(); }",
        "class Inner { render() { return <div />; } }",
        "const o = { m() { return useThing(); } };",
    ])
    def test_nested_scopes_not_entered(self, tsx_parser, find_node, inner):
        body = _body(tsx_parser, find_node, f"function Foo() {{ {inner} return 1; }}", "Foo")
        assert not SubtreeAnalyzer().analyze(body)

    def test_arrow_returning_function(self, tsx_parser, find_node):
        """A concise body that is itself a function is its own scope."""
        tree = tsx_parser.parse_source("export const Foo = () => () => <div />;")
        arrow = find_node(tree.root_node, 'arrow_function')
        assert not SubtreeAnalyzer().analyze(arrow.child_by_field_name('body'))

    def test_single_use(self, tsx_parser, find_node):
        analyzer = SubtreeAnalyzer()
        analyzer.analyze(_body(tsx_parser, find_node, "function Foo() { return <a />; }", "Foo"))
        assert analyzer.should_instrument


class TestCalleeName:

    def test_identifier(self, tsx_parser, find_node):
        tree = tsx_parser.parse_source("useThing(1);")
        assert callee_name(find_node(tree.root_node, 'call_expression')) == "useThing"

    def test_member_expression(self, tsx_parser, find_node):
        tree = tsx_parser.parse_source("React.useThing(1);")
        assert callee_name(find_node(tree.root_node, 'call_expression')) is None
