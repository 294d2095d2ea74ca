"""Property-based tests for reorder reconciliation and placeholder lifetime."""

import asyncio
from hypothesis import given
from hypothesis import strategies as st
from remote_yt.commands import CommandDispatcher
from remote_yt.enqueue import EnqueueTracker
from remote_yt.poller import SnapshotPoller
from remote_yt.reorder import ReorderReconciler, apply_move
from tests.helpers.snapshots import make_entry, make_snapshot
from tests.mocks import ScriptedClient, unreachable

job_lists = st.lists(st.text(alphabet="abcdefghij0123456789", min_size=1, max_size=6), unique=True, max_size=12)


def make_reconciler() -> ReorderReconciler:
    client = ScriptedClient()
    return ReorderReconciler(CommandDispatcher(client, SnapshotPoller(client, interval=0.01)))


@st.composite
def drags(draw):
    job_ids = draw(job_lists.filter(bool))
    job_id = draw(st.sampled_from(job_ids))
    new_index = draw(st.integers(min_value=-3, max_value=len(job_ids) + 3))
    return job_ids, job_id, new_index


class TestReorderProperties:
    """Properties of the local mirror."""

    @given(first=job_lists, second=job_lists)
    def test_latest_snapshot_wins(self, first, second):
        """After two snapshots the order is exactly the second."""
        reconciler = make_reconciler()

        reconciler.accept(1, make_snapshot(first))
        reconciler.accept(2, make_snapshot(second))

        assert reconciler.job_ids == second

    @given(order=job_lists)
    def test_accept_is_idempotent(self, order):
        reconciler = make_reconciler()
        snapshot = make_snapshot(order)

        reconciler.accept(1, snapshot)
        once = reconciler.job_ids
        reconciler.accept(2, snapshot)

        assert reconciler.job_ids == once == order

    @given(drag=drags())
    def test_drag_is_a_permutation(self, drag):
        """A drag never adds, drops or duplicates entries."""
        job_ids, job_id, new_index = drag
        reconciler = make_reconciler()
        reconciler.accept(1, make_snapshot(job_ids))

        command = reconciler.apply_local(job_id, new_index)

        assert sorted(reconciler.job_ids) == sorted(job_ids)
        if command is not None:
            assert reconciler.job_ids[command.new_position] == job_id
            assert command.job_id == job_id

    @given(drag=drags(), server_order=job_lists)
    def test_snapshot_after_drag_wins(self, drag, server_order):
        """Whatever the drag did, the next snapshot is rendered verbatim."""
        job_ids, job_id, new_index = drag
        reconciler = make_reconciler()
        reconciler.accept(1, make_snapshot(job_ids))
        reconciler.apply_local(job_id, new_index)

        reconciler.accept(2, make_snapshot(server_order))

        assert reconciler.job_ids == server_order
        assert reconciler.pending is None

    @given(drag=drags())
    def test_apply_move_matches_server_semantics(self, drag):
        """Moving to new_index is remove-then-insert, as the server does it."""
        job_ids, job_id, new_index = drag
        old_index = job_ids.index(job_id)
        target = min(max(new_index, 0), len(job_ids) - 1)

        moved = apply_move([make_entry(j) for j in job_ids], old_index, target)

        expected = list(job_ids)
        expected.insert(target, expected.pop(old_index))
        assert [entry.job_id for entry in moved] == expected


class TestPlaceholderProperties:
    """Placeholder count across a sequence of polls."""

    @given(outcomes=st.lists(st.booleans(), max_size=8))
    def test_placeholder_cleared_by_first_successful_poll(self, outcomes):
        """A completed add stays visible until exactly the first successful later poll."""
        client = ScriptedClient()
        poller = SnapshotPoller(client, interval=0.01)
        tracker = EnqueueTracker(client, poller)
        poller.add_listener(tracker.reconcile)
        # The refresh after the request fails so the outcomes below decide
        client.queue_responses(unreachable(), *(make_snapshot() if ok else unreachable() for ok in outcomes))

        async def scenario():
            await tracker.submit("https://example.com/v=1")
            counts = []
            for _ in outcomes:
                await poller.poll_once()
                counts.append(tracker.placeholder_count)
            return counts

        counts = asyncio.run(scenario())

        first_success = outcomes.index(True) if True in outcomes else len(outcomes)
        assert counts == [1] * first_success + [0] * (len(outcomes) - first_success)
