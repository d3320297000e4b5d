"""Read-only eligibility check for one candidate declaration."""
import tree_sitter

from .naming import is_hook_name

JSX_NODE_TYPES = frozenset({
    'jsx_element',
    'jsx_self_closing_element',
    'jsx_fragment',
})

# Nested scopes are analyzed on their own, never as part of the outer body
SCOPE_BOUNDARY_TYPES = frozenset({
    'function_declaration',
    'generator_function_declaration',
    'function_expression',
    'function',
    'generator_function',
    'arrow_function',
    'method_definition',
    'class_declaration',
    'abstract_class_declaration',
    'class',
})


def callee_name(call: tree_sitter.Node):
    """Name of a call's callee when it is a bare identifier, else None."""
    callee = call.child_by_field_name('function')
    if callee is None or callee.type != 'identifier':
        return None
    return callee.text.decode('utf-8')


class SubtreeAnalyzer:
    """
    Decides whether a declaration body looks like a component or hook.

    A body qualifies as soon as it contains JSX or calls something named like
    a hook. The ignore list is deliberately not consulted here: a component
    that only calls ``useState`` is still a component.

    One instance answers one question and is then thrown away.
    """

    def __init__(self):
        self.should_instrument = False

    def analyze(self, body: tree_sitter.Node) -> bool:
        # An arrow returning a function: the inner function is its own scope
        stack = [] if body.type in SCOPE_BOUNDARY_TYPES else [body]

        while stack and not self.should_instrument:
            node = stack.pop()

            if node.type in JSX_NODE_TYPES:
                self.should_instrument = True
                break

            if node.type == 'call_expression' and is_hook_name(callee_name(node)):
                self.should_instrument = True
                break

            for child in reversed(node.named_children):
                if child.type not in SCOPE_BOUNDARY_TYPES:
                    stack.append(child)

        return self.should_instrument
