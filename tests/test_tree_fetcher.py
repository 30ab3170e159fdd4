"""Tests for the recursive block tree fetcher."""

import asyncio

import pytest

from prd_reader.notion.models import BlockKind
from prd_reader.notion.tree import BlockTreeFetcher


def block(block_id, block_type="paragraph", has_children=False, text=None):
    data = {"rich_text": [{"plain_text": text or block_id}]}
    return {
        "id": block_id,
        "type": block_type,
        "has_children": has_children,
        block_type: data,
    }


class FakeTreeClient:
    """In-memory stand-in for NotionClient.list_block_children."""

    def __init__(self, children, failures=None, delays=None):
        self.children = children
        self.failures = failures or {}
        self.delays = delays or {}
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def list_block_children(self, block_id):
        self.calls.append(block_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(block_id, 0))
            if block_id in self.failures:
                raise self.failures[block_id]
            return list(self.children.get(block_id, []))
        finally:
            self.in_flight -= 1


def chain(depth):
    """root -> b1 -> b2 -> ... -> b<depth>, every block claiming children."""
    children = {"root": [block("b1", has_children=True)]}
    for level in range(1, depth):
        children[f"b{level}"] = [block(f"b{level + 1}", has_children=True)]
    return children


@pytest.mark.asyncio
async def test_fetches_nested_children_in_order():
    client = FakeTreeClient(
        {
            "root": [
                block("a", has_children=True),
                block("b"),
                block("c", has_children=True),
            ],
            "a": [block("a1"), block("a2")],
            "c": [block("c1")],
        },
        delays={"a": 0.02},
    )

    nodes = await BlockTreeFetcher(client).fetch("root")

    assert [n.id for n in nodes] == ["a", "b", "c"]
    assert [n.id for n in nodes[0].children] == ["a1", "a2"]
    assert [n.id for n in nodes[2].children] == ["c1"]
    assert nodes[0].expanded and nodes[2].expanded
    assert not nodes[1].unexpanded


@pytest.mark.asyncio
async def test_order_is_independent_of_completion_order():
    """A slow first sibling still ends up first."""
    client = FakeTreeClient(
        {
            "root": [block("slow", has_children=True), block("fast", has_children=True)],
            "slow": [block("s1")],
            "fast": [block("f1")],
        },
        delays={"slow": 0.05, "fast": 0.0},
    )

    nodes = await BlockTreeFetcher(client).fetch("root")

    assert [n.id for n in nodes] == ["slow", "fast"]
    assert nodes[0].children[0].id == "s1"
    assert nodes[1].children[0].id == "f1"


@pytest.mark.asyncio
async def test_depth_ceiling():
    client = FakeTreeClient(chain(5))

    nodes = await BlockTreeFetcher(client).fetch("root", max_depth=2)

    b1 = nodes[0]
    b2 = b1.children[0]
    assert b1.id == "b1" and b2.id == "b2"
    # b2 sits at depth 2: attached, but its children are not fetched
    assert b2.children == []
    assert b2.unexpanded
    assert "b2" not in client.calls


@pytest.mark.asyncio
async def test_max_depth_one_keeps_top_level_only():
    client = FakeTreeClient(chain(3))

    nodes = await BlockTreeFetcher(client).fetch("root", max_depth=1)

    assert nodes[0].unexpanded
    assert client.calls == ["root"]


@pytest.mark.asyncio
async def test_rejects_non_positive_depth():
    with pytest.raises(ValueError):
        await BlockTreeFetcher(FakeTreeClient({})).fetch("root", max_depth=0)


@pytest.mark.asyncio
async def test_default_ceiling_terminates_on_self_referencing_data():
    """A block listing itself as its own child stops at the ceiling."""
    client = FakeTreeClient({"root": [block("loop", has_children=True)], "loop": [block("loop", has_children=True)]})

    nodes = await BlockTreeFetcher(client).fetch("root", max_depth=5)

    depth = 0
    node = nodes[0]
    while node.children:
        node = node.children[0]
        depth += 1
    assert depth == 4
    assert node.unexpanded


@pytest.mark.asyncio
async def test_failed_subtree_becomes_empty():
    client = FakeTreeClient(
        {
            "root": [block("bad", has_children=True), block("good", has_children=True)],
            "good": [block("g1")],
        },
        failures={"bad": RuntimeError("500 from Notion")},
    )
    warnings = []

    nodes = await BlockTreeFetcher(client).fetch("root", warnings=warnings)

    assert nodes[0].children == []
    assert nodes[0].unexpanded
    assert [n.id for n in nodes[1].children] == ["g1"]
    assert len(warnings) == 1
    assert "bad" in warnings[0]


@pytest.mark.asyncio
async def test_root_failure_propagates():
    client = FakeTreeClient({}, failures={"root": RuntimeError("unauthorized")})

    with pytest.raises(RuntimeError):
        await BlockTreeFetcher(client).fetch("root")


@pytest.mark.asyncio
async def test_unknown_block_type_becomes_placeholder():
    client = FakeTreeClient(
        {"root": [{"id": "x", "type": "synced_block", "synced_block": {"a": 1}}, {"id": "y"}]}
    )

    nodes = await BlockTreeFetcher(client).fetch("root")

    assert [n.kind for n in nodes] == [BlockKind.UNKNOWN, BlockKind.UNKNOWN]
    assert nodes[0].payload == {}
    assert nodes[0].type_name == "synced_block"


@pytest.mark.asyncio
async def test_concurrency_is_bounded():
    children = {"root": [block(f"n{i}", has_children=True) for i in range(10)]}
    for i in range(10):
        children[f"n{i}"] = [block(f"n{i}-c")]
    client = FakeTreeClient(children, delays={f"n{i}": 0.01 for i in range(10)})

    nodes = await BlockTreeFetcher(client, max_concurrency=3).fetch("root")

    assert client.max_in_flight <= 3
    assert [n.children[0].id for n in nodes] == [f"n{i}-c" for i in range(10)]


@pytest.mark.asyncio
async def test_deadline_abandons_slow_subtrees():
    client = FakeTreeClient(
        {
            "root": [block("slow", has_children=True), block("plain")],
            "slow": [block("s1")],
        },
        delays={"slow": 1.0},
    )
    warnings = []
    deadline = asyncio.get_running_loop().time() + 0.1

    nodes = await BlockTreeFetcher(client).fetch("root", deadline=deadline, warnings=warnings)

    assert [n.id for n in nodes] == ["slow", "plain"]
    assert nodes[0].children == []
    assert nodes[0].unexpanded
    assert any("Deadline" in w for w in warnings)


@pytest.mark.asyncio
async def test_ceiling_truncation_is_reported():
    client = FakeTreeClient(
        {
            "root": [block("t1", "table", has_children=True), block("p1", has_children=True)],
            "t1": [block("r1", "table_row")],
            "p1": [block("p2", has_children=True)],
        }
    )
    warnings = []

    nodes = await BlockTreeFetcher(client).fetch("root", max_depth=1, warnings=warnings)

    assert all(n.unexpanded for n in nodes)
    assert warnings == ["2 block(s) at the depth ceiling (1) have unfetched children"]


@pytest.mark.asyncio
async def test_no_truncation_warning_when_tree_fits():
    warnings = []

    await BlockTreeFetcher(FakeTreeClient(chain(3))).fetch("root", max_depth=5, warnings=warnings)

    assert warnings == []


@pytest.mark.asyncio
async def test_failed_subtree_is_not_counted_as_truncated():
    client = FakeTreeClient(
        {"root": [block("bad", has_children=True)]},
        failures={"bad": RuntimeError("boom")},
    )
    warnings = []

    await BlockTreeFetcher(client).fetch("root", max_depth=3, warnings=warnings)

    assert len(warnings) == 1
    assert "Failed to fetch children of block bad" in warnings[0]
