"""All hoods of one PGA account, polled with a single batched call."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from .api import PandoApiError, PandoClient
from .connectivity import ConnectivityMonitor
from .const import OFFLINE_THRESHOLD
from .models import PandoThing, filter_hoods
from .reconciler import HoodReconciler

_LOGGER = logging.getLogger(__name__)


class HoodGroup:
    """Owns one reconciler per hood plus the shared connectivity monitor."""

    def __init__(
        self,
        client: PandoClient,
        *,
        threshold: int = OFFLINE_THRESHOLD,
        reconciler_factory: Optional[Callable[..., HoodReconciler]] = None,
        **reconciler_options: Any,
    ) -> None:
        self._client = client
        self.monitor = ConnectivityMonitor(threshold)
        self.reconcilers: Dict[str, HoodReconciler] = {}
        self._factory = reconciler_factory or HoodReconciler
        self._reconciler_options = reconciler_options
        self.monitor.add_listener(self._on_connectivity_change)

    @property
    def online(self) -> bool:
        return self.monitor.online

    async def async_discover(self) -> List[HoodReconciler]:
        """Create a reconciler for every hood on the account.

        Transport errors propagate so setup can be retried.
        """
        _LOGGER.info("Discovering Pando hoods")
        things = await self._client.get_things()
        hoods = filter_hoods(things)
        _LOGGER.info("Found %s Pando hood(s)", len(hoods))
        for thing in hoods:
            if thing.uid in self.reconcilers:
                continue
            _LOGGER.debug("Adding hood %s (%s)", thing.display_name, thing.uid)
            self.reconcilers[thing.uid] = self._factory(
                self._client, thing, **self._reconciler_options
            )
            if not self.monitor.online:
                self.reconcilers[thing.uid].set_online(False)
        return list(self.reconcilers.values())

    async def async_poll(self) -> Dict[str, PandoThing]:
        """Fetch every hood in one call and fan the result out.

        A failure is counted toward the offline threshold and re-raised for
        the caller's polling loop to log; the loop itself keeps running.
        """
        try:
            things = await self._client.get_things()
        except PandoApiError as ex:
            self.monitor.record_failure()
            _LOGGER.warning(
                "Failed to poll hoods (attempt %s/%s): %s",
                self.monitor.failures,
                self.monitor.threshold,
                ex,
            )
            raise

        # Clears the fault before any state push below
        self.monitor.record_success()
        by_uid = {thing.uid: thing for thing in things}
        for uid, reconciler in self.reconcilers.items():
            thing = by_uid.get(uid)
            if thing is None:
                _LOGGER.warning("Hood %s not found in poll response", uid)
                continue
            reconciler.apply_poll(thing)
        return by_uid

    def _on_connectivity_change(self, online: bool) -> None:
        for reconciler in self.reconcilers.values():
            reconciler.set_online(online)

    def shutdown(self) -> None:
        for reconciler in self.reconcilers.values():
            reconciler.shutdown()
