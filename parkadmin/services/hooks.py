"""
Post-commit hooks.

Side effects that must not block the primary write (deleting images from
the CDN after a record is removed or its images replaced) are registered
on a PostCommitHooks list while the request runs, and executed once the
database transaction has committed.

A failing hook is logged and collected, never raised, so the caller can
report it as a warning.

Usage:
------
    hooks = PostCommitHooks()
    hooks.add("delete_images", lambda: pipeline.delete(old_urls))
    await db.commit()
    failures = await hooks.run()
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from parkadmin.core.logging import get_logger

logger = get_logger(__name__)

Hook = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class HookFailure:
    name: str
    error: str

    def __str__(self) -> str:
        return f"{self.name}: {self.error}"


class PostCommitHooks:
    """Ordered list of named async callables run after commit."""

    def __init__(self):
        self._hooks: List[Tuple[str, Hook]] = []

    def __len__(self) -> int:
        return len(self._hooks)

    def add(self, name: str, hook: Hook) -> None:
        self._hooks.append((name, hook))

    async def run(self) -> List[HookFailure]:
        """
        Run every hook in registration order.

        A hook fails either by raising or by returning a non-empty list of
        error strings (the shape ImagePipeline.delete returns).
        """
        failures: List[HookFailure] = []
        hooks, self._hooks = self._hooks, []

        for name, hook in hooks:
            try:
                outcome = await hook()
            except Exception as e:
                logger.error("post_commit_hook_failed", hook=name, error=str(e), exc_info=True)
                failures.append(HookFailure(name, str(e) or e.__class__.__name__))
                continue

            if isinstance(outcome, list) and outcome:
                for error in outcome:
                    logger.warning("post_commit_hook_partial_failure", hook=name, error=str(error))
                    failures.append(HookFailure(name, str(error)))

        return failures


def failures_warning(failures: List[HookFailure]) -> Optional[str]:
    """Join hook failures into one warning message (None when all succeeded)."""
    if not failures:
        return None
    return "Some cleanup steps failed: " + "; ".join(str(f) for f in failures)
