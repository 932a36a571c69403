import pytest

from agentsdk.core.content import new_user_message
from agentsdk.core.node import (
    Node,
    NodeID,
    NodeState,
    ResultKind,
    TreePath,
    TxOp,
    TxOpKind,
    new_delta,
    new_final,
    parse_tree_path,
)


def test_tree_path_string():
    assert str(TreePath((0, 1, 2))) == "0/1/2"
    assert str(TreePath()) == ""


@pytest.mark.parametrize("path", [(), (0,), (0, 1, 2), (7, 0, 3, 12)])
def test_tree_path_round_trip(path):
    tree_path = TreePath(path)
    assert parse_tree_path(str(tree_path)) == tree_path


def test_parse_empty_is_root():
    assert parse_tree_path("") == TreePath()
    assert len(parse_tree_path("")) == 0


@pytest.mark.parametrize("text", ["0/x", "a", "0//1", "1/ 2"])
def test_parse_invalid_segment(text):
    with pytest.raises(ValueError, match="invalid tree path segment"):
        parse_tree_path(text)


def test_parent():
    assert TreePath((0, 1, 2)).parent() == TreePath((0, 1))
    assert TreePath((4,)).parent() == TreePath()
    assert TreePath().parent() == TreePath()


def test_is_ancestor_of():
    root = TreePath((0,))
    assert root.is_ancestor_of(TreePath((0, 1, 2)))
    assert not root.is_ancestor_of(TreePath((0,)))
    assert not TreePath((1,)).is_ancestor_of(TreePath((0, 1)))
    assert not TreePath((0, 1)).is_ancestor_of(TreePath((0,)))
    assert TreePath().is_ancestor_of(TreePath((3,)))


def test_parent_is_ancestor_invariant():
    path = TreePath((2, 5, 1))
    assert path.parent().is_ancestor_of(path)


def test_results():
    delta = new_delta("partial")
    final = new_final(42)
    assert delta.kind is ResultKind.DELTA
    assert delta.value == "partial"
    assert final.kind is ResultKind.FINAL
    assert final.value == 42
    assert str(ResultKind.DELTA) == "delta"


def test_node_defaults():
    message = new_user_message("hi")
    node = Node(NodeID("n1"), message, summary_of=[NodeID("a")])
    assert node.state is NodeState.ACTIVE
    assert node.parent_id == ""
    assert node.message == message
    assert node.summary_of == ("a",)


def test_node_state_order():
    assert NodeState(0) is NodeState.ACTIVE
    node = Node(NodeID("n2"), new_user_message("x"), state=NodeState(2))
    assert node.state.value == 2
    assert [s.value for s in NodeState] == [0, 1, 2]


def test_tx_op_kind_values():
    op = TxOp(TxOpKind.SET_BRANCH, branch_id="main", tip_id="n1")
    assert op.kind.value == "set_branch"
    assert TxOpKind("add_node") is TxOpKind.ADD_NODE
    assert op.node is None