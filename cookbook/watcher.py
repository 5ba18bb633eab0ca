import logging
from collections import deque
from typing import Deque, List, Optional, Tuple

from bs4 import Tag

from .dom import MutationRecord, Page
from .renderer import PageRenderer

logger = logging.getLogger(__name__)


class MutationWatcher:
    """Queues element nodes added to an observed page and hands them to the renderer.

    Nodes are rendered when the queue is drained with ``flush()``, never from
    inside the mutation itself. Each node remembers the renderer generation it
    was queued under, so a language change in between drops it.
    """

    def __init__(self, renderer: PageRenderer):
        self.renderer = renderer
        self.page: Optional[Page] = None
        self._pending: Deque[Tuple[Tag, int]] = deque()

    def observe(self, page: Page) -> None:
        if self.page is not None and self.page is not page:
            self.disconnect()
        self.page = page
        page.observe(self._on_mutations)

    def disconnect(self) -> None:
        if self.page is not None:
            self.page.unobserve(self._on_mutations)
        self.page = None
        self._pending.clear()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def _on_mutations(self, records: List[MutationRecord]) -> None:
        for record in records:
            if record.type != "childList":
                continue
            for node in record.added_nodes:
                if isinstance(node, Tag):
                    self._pending.append((node, self.renderer.generation))

    def flush(self) -> int:
        """Render every queued node; returns the number of elements translated."""
        translated = 0
        while self._pending:
            node, generation = self._pending.popleft()
            try:
                translated += self.renderer.on_node_added(node, generation)
            except Exception as e:
                logger.warning(f"Failed to translate added <{node.name}>: {e}")
        return translated
