"""
Dirty Detection Conformance Tests

INVARIANT: A state is clean exactly when every change was asserted.

    ∀ monitors M, after reset():
        no live value moved ⟹ check_dirty() finds nothing
        k monitors moved, none asserted ⟹ check_dirty() finds exactly k
        a moved monitor is asserted ⟹ it is no longer reported
"""

import asyncio

from hypothesis import given, settings
from hypothesis import strategies as st

from statewatch import DappState, WalletMonitor, DirtyStateError

from tests.fake_chain import FakeChain


balances = st.integers(min_value=0, max_value=10 ** 30)


def make_state(values):
    addresses = [f"0x{i:040x}" for i in range(len(values))]
    chain = FakeChain(balances=dict(zip(addresses, values)))
    wallets = {f"w{i}": WalletMonitor(chain, address) for i, address in enumerate(addresses)}
    return chain, addresses, DappState(wallets=wallets)


class TestDirtyDetectionProperties:
    """Property-based dirty detection tests."""

    @given(st.lists(balances, min_size=1, max_size=8))
    @settings(max_examples=50)
    def test_clean_after_reset(self, values):
        """
        PROPERTY: Immediately after reset(), nothing is dirty.
        """
        chain, _, state = make_state(values)

        async def scenario():
            await state.reset()
            return await state.check_dirty()

        assert asyncio.run(scenario()) == []
        state.assert_no_exceptions()

    @given(st.lists(balances, min_size=1, max_size=8), st.data())
    @settings(max_examples=50)
    def test_each_unasserted_change_is_reported_once(self, values, data):
        """
        PROPERTY: k drifted monitors yield exactly k findings, in group order.
        """
        chain, addresses, state = make_state(values)
        moved = data.draw(st.sets(st.integers(min_value=0, max_value=len(values) - 1)))

        async def scenario():
            await state.reset()
            for index in moved:
                chain.set_balance(addresses[index], values[index] + 1)
            return await state.check_dirty()

        findings = asyncio.run(scenario())

        assert [f.name for f in findings] == [f"w{i}" for i in sorted(moved)]
        for finding in findings:
            index = int(finding.name[1:])
            assert finding.last == str(values[index])
            assert finding.dirty == str(values[index] + 1)

    @given(balances, st.integers(min_value=1, max_value=10 ** 20))
    @settings(max_examples=50)
    def test_asserted_change_is_not_reported(self, start, delta):
        """
        PROPERTY: expect_rises_by(delta) after a rise of delta leaves the state clean.
        """
        chain, addresses, state = make_state([start])

        async def scenario():
            await state.reset()
            chain.set_balance(addresses[0], start + delta)
            await state.wallets.w0.expect_rises_by(delta)
            return await state.check_dirty()

        assert asyncio.run(scenario()) == []

    @given(balances, st.integers(min_value=1, max_value=5))
    @settings(max_examples=25)
    def test_repeated_checks_are_stable(self, start, repeats):
        """
        PROPERTY: check_dirty() does not accept the drifted value as a baseline.
        """
        chain, addresses, state = make_state([start])

        async def scenario():
            await state.reset()
            chain.set_balance(addresses[0], start + 1)
            for _ in range(repeats):
                await state.check_dirty()

        asyncio.run(scenario())

        assert len(state.exceptions) == repeats
        assert state.wallets.w0.last_value == start
        try:
            state.assert_no_exceptions()
        except DirtyStateError as exc:
            assert len(exc.findings) == repeats
        else:
            raise AssertionError("dirty state was not reported")
