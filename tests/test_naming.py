"""Unit tests for the component and hook naming conventions."""
import pytest

from react_jitter.analyzer.naming import is_component_name, is_hook_name, should_wrap_hook
from react_jitter.config import DEFAULT_IGNORED_HOOKS, RUNTIME_SYMBOL, TransformOptions


class TestHookNames:

    @pytest.mark.parametrize("name", ["useState", "useFieldValues", "useX", "useJitterScope"])
    def test_hook_names(self, name):
        assert is_hook_name(name)

    @pytest.mark.parametrize("name", ["use", "user", "useless", "Use", "UseThing", "", None])
    def test_not_hook_names(self, name):
        """`use` must be followed by an uppercase letter."""
        assert not is_hook_name(name)


class TestComponentNames:

    @pytest.mark.parametrize("name", ["Foo", "UserForm", "A"])
    def test_capitalized(self, name):
        assert is_component_name(name)

    @pytest.mark.parametrize("name", ["foo", "useFoo", "_Foo", "", None])
    def test_not_capitalized(self, name):
        assert not is_component_name(name)


class TestShouldWrapHook:

    def test_default_ignore_list(self):
        """Built-in hooks are left alone, custom hooks are wrapped."""
        ignored = TransformOptions().ignored_hooks
        assert not should_wrap_hook("useState", ignored)
        assert not should_wrap_hook("useEffect", ignored)
        assert should_wrap_hook("useCustomThing", ignored)

    def test_context_and_reducer_are_instrumented(self):
        ignored = TransformOptions().ignored_hooks
        assert should_wrap_hook("useContext", ignored)
        assert should_wrap_hook("useReducer", ignored)

    def test_runtime_symbol_always_ignored(self):
        """Even an empty user ignore list keeps the runtime initializer out."""
        options = TransformOptions(ignored_hooks=frozenset())
        assert RUNTIME_SYMBOL in options.ignored_hooks
        assert not should_wrap_hook(RUNTIME_SYMBOL, options.ignored_hooks)
        assert should_wrap_hook("useState", options.ignored_hooks)

    def test_non_hook_never_wrapped(self):
        assert not should_wrap_hook("fetchData", frozenset())
        assert not should_wrap_hook(None, frozenset())

    def test_defaults_contain_runtime_symbol(self):
        assert DEFAULT_IGNORED_HOOKS[0] == RUNTIME_SYMBOL
