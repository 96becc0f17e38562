"""Define a pull-based model of the shared world scene."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable

from pick_place.logging import log_error, log_info
from pick_place.results import FailureKind, Result
from pick_place.world_model.scene_snapshot import SceneSnapshot

if TYPE_CHECKING:
    from pick_place.interfaces import SceneChannel
    from pick_place.world_model.collision_models import AttachedObject, CollisionObject


class SceneModel:
    """A pull-based cache of world collision objects and robot attachment state.

    Nothing is refreshed implicitly: every scene-dependent decision must call `refresh()` and use
        the returned snapshot, which is only valid until the next refresh.
    """

    def __init__(
        self,
        channel: SceneChannel,
        publish_timeout_s: float = 2.0,
        poll_period_s: float = 0.05,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the scene model around the given synchronization channel.

        :param channel: Channel used to pull scene state and publish scene changes
        :param publish_timeout_s: Duration (seconds) to wait for a published change to appear
        :param poll_period_s: Duration (seconds) between polls while waiting for confirmation
        :param clock: Monotonic clock function (seconds), injectable for testing
        :param sleep: Sleep function (seconds), injectable for testing
        """
        self._channel = channel
        self.publish_timeout_s = publish_timeout_s
        self.poll_period_s = poll_period_s
        self._clock = clock
        self._sleep = sleep
        self._latest: SceneSnapshot | None = None

    @property
    def latest_snapshot(self) -> SceneSnapshot | None:
        """Retrieve the most recently fetched snapshot (None if nothing has been fetched)."""
        return self._latest

    def refresh(self) -> SceneSnapshot:
        """Pull the authoritative scene state, replacing the cached snapshot.

        :return: Freshly fetched scene snapshot
        """
        snapshot = self._channel.request_state()
        self._latest = snapshot
        return snapshot

    def find_object(
        self,
        object_id: str,
        snapshot: SceneSnapshot | None = None,
    ) -> CollisionObject | None:
        """Find the named world object in the given snapshot (or the most recent one).

        :param object_id: Unique id of the object to be found
        :param snapshot: Snapshot to be searched (defaults to the most recently fetched one)
        :return: Collision object with the given id, or None if it isn't present
        """
        snapshot = snapshot or self._latest
        if snapshot is None:
            return None

        obj = snapshot.find_object(object_id)
        if obj is None:
            log_error(f"Failed to find object '{object_id}' in the planning scene.")
        else:
            log_info(f"Found object '{object_id}' in the planning scene.")
        return obj

    def publish_diff(self, diff: SceneSnapshot) -> Result[SceneSnapshot]:
        """Publish an incremental scene change and wait until it is observed in the scene.

        :param diff: Snapshot (with is_diff=True) describing the change
        :return: Result holding the first snapshot that reflects the change
        """
        if not diff.is_diff:
            raise ValueError("Only incremental snapshots (is_diff=True) may be published.")

        self._channel.publish_diff(diff)
        return self._await_confirmation(diff, "scene diff")

    def publish_attached(self, attached: AttachedObject) -> Result[SceneSnapshot]:
        """Publish an attached-object change and wait until it is observed in the scene.

        :param attached: Attached object tagged with the operation to be applied
        :return: Result holding the first snapshot that reflects the change
        """
        self._channel.publish_attached(attached)
        expected = SceneSnapshot.from_objects([], [attached], is_diff=True)
        return self._await_confirmation(expected, f"attachment of '{attached.object_id}'")

    def _await_confirmation(self, diff: SceneSnapshot, description: str) -> Result[SceneSnapshot]:
        """Poll fresh snapshots until one reflects the given diff or the timeout elapses."""
        deadline = self._clock() + self.publish_timeout_s

        while True:
            snapshot = self.refresh()
            if snapshot.reflects(diff):
                log_info(f"Confirmed {description} in the planning scene.")
                return Result.ok(snapshot)

            if self._clock() >= deadline:
                message = f"{description} not observed within {self.publish_timeout_s} seconds"
                log_error(f"Unconfirmed publication: {message}.")
                return Result.fail(FailureKind.UNCONFIRMED, message)

            self._sleep(self.poll_period_s)
