"""
state.py - Aggregating monitors for one test

DappState owns every monitor a test cares about, grouped by kind, and is the
single handle a test passes around (to wallet calls and lifecycle hooks).

Typical test lifecycle:
    1. await state.reset()                 accept the live values before the test
    2. await wallet.call(state, op, ...)   each call first requires a clean state
    3. await monitor.expect*(...)          assert the changes the test cares about
    4. await state.check_dirty()           after the test body
       state.assert_no_exceptions()        fail on anything left un-asserted

Dirty findings are not raised by check_dirty(): they accumulate in
state.exceptions until assert_no_exceptions() escalates them, and stay there
until reset() or clear_exceptions().
"""

from __future__ import annotations
import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .core import FetchError, DirtyStateError
from .monitor import Monitor


@dataclass(frozen=True, slots=True)
class DirtyStateFinding:
    """
    An un-asserted change detected on one monitor.

    Attributes:
        kind: Monitor kind label (e.g. "eth-wallet")
        name: Monitor name within its group
        last: Serialized last accepted value
        dirty: Serialized live value that drifted from it
    """
    kind: str
    name: str
    last: str
    dirty: str

    @property
    def message(self) -> str:
        return f"{self.kind}.{self.name}: un-asserted state change detected ({self.last}) => ({self.dirty})"

    def __str__(self) -> str:
        return self.message


class MonitorGroup(Mapping):
    """
    Named, read-only mapping of monitor name -> monitor.

    Monitors are reachable by key or by attribute: group["alice"] or group.alice.
    """

    def __init__(self, name: str, monitors: Optional[Mapping[str, Monitor]] = None):
        self.name = name
        self._monitors: Dict[str, Monitor] = dict(monitors or {})

    def __getitem__(self, key: str) -> Monitor:
        return self._monitors[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._monitors)

    def __len__(self) -> int:
        return len(self._monitors)

    def __getattr__(self, item: str) -> Monitor:
        monitors = self.__dict__.get("_monitors", {})
        try:
            return monitors[item]
        except KeyError:
            raise AttributeError(f"No monitor named {item!r} in group {self.__dict__.get('name')!r}") from None

    def __repr__(self) -> str:
        return f"MonitorGroup({self.name}: {', '.join(self._monitors)})"


class DappState:
    """
    Tracks a set of monitor groups for a test.

    Group membership is fixed at construction. Within a group, monitors are
    reset and checked concurrently; groups are processed one after another
    in construction order (wallets, erc20, contract, then any extra groups).

    Attributes:
        wallets: Native-currency balance monitors
        erc20: Token balance monitors
        contract: Contract field monitors
        groups: Every group, in processing order
        exceptions: Dirty findings queued by check_dirty()
        verbose: Print findings as they are discovered

    Example:
        state = DappState(
            wallets={"alice": WalletMonitor(chain, alice)},
            contract={"owner": ContractFieldMonitor(vault.owner)},
        )
        await state.reset()
        ...
        await state.check_dirty()
        state.assert_no_exceptions()
    """

    def __init__(
        self,
        wallets: Optional[Mapping[str, Monitor]] = None,
        erc20: Optional[Mapping[str, Monitor]] = None,
        contract: Optional[Mapping[str, Monitor]] = None,
        *,
        verbose: bool = False,
        **groups: Mapping[str, Monitor],
    ):
        """
        Create the aggregator.

        Args:
            wallets: A map of <readable-name, wallet monitor>
            erc20: A map of <readable-name, token balance monitor>
            contract: A map of <readable-name, contract field monitor>
            verbose: Enable debug output; monitors without an explicit
                     verbose setting inherit it
            **groups: Additional named groups of monitors
        """
        self.wallets = MonitorGroup("wallets", wallets)
        self.erc20 = MonitorGroup("erc20", erc20)
        self.contract = MonitorGroup("contract", contract)
        self.groups: Tuple[MonitorGroup, ...] = (self.wallets, self.erc20, self.contract) + tuple(
            MonitorGroup(name, monitors) for name, monitors in groups.items()
        )
        self._groups_by_name: Dict[str, MonitorGroup] = {group.name: group for group in self.groups}
        self.exceptions: List[DirtyStateFinding] = []
        self.verbose = verbose

        for group in self.groups:
            for monitor in group.values():
                if monitor.verbose is None:
                    monitor.verbose = verbose

    def group(self, name: str) -> MonitorGroup:
        """Return the group registered under name."""
        if name not in self._groups_by_name:
            raise KeyError(f"No monitor group named {name!r}")
        return self._groups_by_name[name]

    def __getattr__(self, item: str) -> MonitorGroup:
        groups = self.__dict__.get("_groups_by_name", {})
        try:
            return groups[item]
        except KeyError:
            raise AttributeError(f"{type(self).__name__} has no monitor group {item!r}") from None

    # ========================================================================
    # RESET / DIRTY CHECK
    # ========================================================================

    async def _run_group(self, group: MonitorGroup, operation: str, verb: str) -> List[Tuple[str, Any]]:
        """
        Run operation on every monitor of group concurrently.

        All monitors are allowed to settle before the first failure (in
        group order) is raised as a FetchError.
        """
        names = list(group)
        results = await asyncio.gather(
            *(getattr(group[name], operation)() for name in names),
            return_exceptions=True,
        )
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                monitor = group[name]
                raise FetchError(
                    f"Failed to {verb} value of {monitor.kind}.{name}: {result!r}",
                    kind=monitor.kind,
                    name=name,
                ) from result
        return list(zip(names, results))

    async def reset(self) -> None:
        """Accept the live value of every tracked monitor and drop queued findings."""
        for group in self.groups:
            await self._run_group(group, "reset", "reset")
        self.exceptions = []

    async def check_dirty(self) -> List[DirtyStateFinding]:
        """
        Check every monitor for un-asserted changes.

        Each dirty monitor queues one finding on self.exceptions.

        Returns:
            The findings discovered by this pass, in discovery order

        Raises:
            FetchError: If a monitor could not read its live value.
        """
        findings: List[DirtyStateFinding] = []
        for group in self.groups:
            outcomes = await self._run_group(group, "check_dirty", "check")
            for name, dirty in outcomes:
                if not dirty:
                    continue
                monitor = group[name]
                finding = DirtyStateFinding(
                    kind=monitor.kind,
                    name=name,
                    last=monitor.serialize_value(monitor.last_value),
                    dirty=monitor.serialize_value(monitor.dirty_value),
                )
                if self.verbose:
                    print(f"⚠️  {finding.message}")
                self.exceptions.append(finding)
                findings.append(finding)
        return findings

    def assert_no_exceptions(self) -> None:
        """
        Assert that no findings were queued by check_dirty().

        Raises:
            DirtyStateError: Listing every queued finding, numbered in discovery order.
        """
        if self.exceptions:
            listing = "\n".join(f"#{index}: {finding.message}" for index, finding in enumerate(self.exceptions))
            raise DirtyStateError(
                f"The following exceptions occurred:\n{listing}",
                findings=tuple(self.exceptions),
            )

    def clear_exceptions(self) -> None:
        """Drop queued findings without re-reading any monitor."""
        self.exceptions = []
