from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal


@dataclass(frozen=True)
class ProgressSummary:
    percent: int
    completed_count: int
    total_count: int

    @property
    def is_complete(self) -> bool:
        return self.total_count > 0 and self.completed_count == self.total_count


def compute_progress(content_items, progress_by_item_id: dict) -> ProgressSummary:
    """
    Percentage of ``content_items`` marked completed in ``progress_by_item_id``.

    Completion flags for ids that are not in ``content_items`` are ignored, so
    rows left over from deleted items never push the result above 100. An
    empty course is 0%, not 100%.
    """
    item_ids = {item.id for item in content_items}
    total_count = len(item_ids)
    if total_count == 0:
        return ProgressSummary(percent=0, completed_count=0, total_count=0)

    completed_count = sum(
        1 for item_id in item_ids if progress_by_item_id.get(item_id, False)
    )
    percentage = (Decimal(completed_count) / Decimal(total_count)) * 100
    percent = int(percentage.quantize(Decimal("1."), rounding=ROUND_HALF_UP))
    # 199/200 rounds to 100; only a full set of completions may report 100
    if percent == 100 and completed_count < total_count:
        percent = 99
    return ProgressSummary(
        percent=percent, completed_count=completed_count, total_count=total_count
    )


def resume_target(content_items, progress_by_item_id: dict, availability_by_item_id: dict):
    """
    Item to resume at: the first available, not yet completed item in course
    order; otherwise the first available item; otherwise ``None``.
    """
    first_available = None
    for item in content_items:
        if not availability_by_item_id.get(item.id, False):
            continue
        if first_available is None:
            first_available = item
        if not progress_by_item_id.get(item.id, False):
            return item
    return first_available
