"""Consecutive unknown-command counting."""

from pydantic import Field

from conflux.core.base import BaseState


class ErrorToleranceTracker(BaseState):
    """Counts consecutive misses and decides when to fall back.

    Once the count exceeds the threshold, the active conflict is
    resolved with the fallback resolution so the session keeps moving.
    This is a policy, not an error.
    """

    threshold: int = Field(
        default=3,
        ge=1,
        description="Misses tolerated before the fallback fires",
    )
    count: int = Field(default=0, description="Consecutive misses so far")
    fallbacks: int = Field(default=0, description="Fallbacks fired so far")

    def record_success(self) -> None:
        self.count = 0

    def record_unknown(self) -> bool:
        """Count one miss.

        Returns:
            True if the fallback should fire now. The count restarts
            from zero when it does.
        """
        self.count += 1
        if self.count > self.threshold:
            self.count = 0
            self.fallbacks += 1
            return True
        return False

    def record_failure(self) -> bool:
        """Count one miss for an edit that came back malformed.

        Unlike record_unknown, the fallback fires only when the count
        was already past the threshold before this miss.

        Returns:
            True if the fallback should fire. The count restarts from
            zero when it does.
        """
        already_over = self.count > self.threshold
        self.count += 1
        if already_over:
            self.count = 0
            self.fallbacks += 1
            return True
        return False
