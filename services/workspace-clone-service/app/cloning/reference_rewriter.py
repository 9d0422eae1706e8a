# services/workspace-clone-service/app/cloning/reference_rewriter.py
"""Rewrite layout on-load action references from template ids to cloned ids.

Runs only against the complete old -> new action id table. Every rewrite builds
new reference lists and new Layout/Page values; nothing shared with the stream's
results is mutated. References with no entry in the table are left as they are
and reported as ReferenceInconsistency values (non-fatal).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Literal, Mapping, Optional, Tuple

from app.models import ActionIdPair, ActionReference, Layout, Page, ReferenceInconsistency

logger = logging.getLogger("app.cloning.references")

Variant = Literal["draft", "published"]
ReferenceGroups = List[List[ActionReference]]


def build_remap_table(pairs: Iterable[ActionIdPair]) -> Dict[str, str]:
    return {p.source_action_id: p.cloned_action_id for p in pairs}


@dataclass
class RewriteResult:
    pages: List[Page] = field(default_factory=list)
    changed_pages: List[Page] = field(default_factory=list)
    inconsistencies: List[ReferenceInconsistency] = field(default_factory=list)


def rewrite_reference_groups(
    groups: Optional[ReferenceGroups],
    remap: Mapping[str, str],
    *,
    page_id: str,
    layout_id: Optional[str],
    variant: Variant,
    inconsistencies: List[ReferenceInconsistency],
) -> Tuple[Optional[ReferenceGroups], bool]:
    if groups is None:
        return None, False

    changed = False
    rewritten: ReferenceGroups = []
    for group in groups:
        new_group: List[ActionReference] = []
        for ref in group:
            new_id = remap.get(ref.id) if ref.id is not None else None
            if new_id is None:
                logger.warning(
                    "Couldn't find cloned action id for %s on-load action %s in page %s",
                    variant, ref.id, page_id,
                )
                inconsistencies.append(
                    ReferenceInconsistency(page_id=page_id, layout_id=layout_id, action_id=ref.id, variant=variant)
                )
                new_group.append(ref)
                continue
            new_group.append(ref.model_copy(update={"id": new_id}))
            changed = True
        rewritten.append(new_group)
    return rewritten, changed


def rewrite_layout(
    layout: Layout,
    remap: Mapping[str, str],
    *,
    page_id: str,
    inconsistencies: List[ReferenceInconsistency],
) -> Tuple[Layout, bool]:
    draft, draft_changed = rewrite_reference_groups(
        layout.layout_on_load_actions, remap,
        page_id=page_id, layout_id=layout.id, variant="draft", inconsistencies=inconsistencies,
    )
    published, published_changed = rewrite_reference_groups(
        layout.published_layout_on_load_actions, remap,
        page_id=page_id, layout_id=layout.id, variant="published", inconsistencies=inconsistencies,
    )
    new_layout = layout.model_copy(
        update={"layout_on_load_actions": draft, "published_layout_on_load_actions": published}
    )
    return new_layout, draft_changed or published_changed


def rewrite_page(
    page: Page,
    remap: Mapping[str, str],
    inconsistencies: List[ReferenceInconsistency],
) -> Tuple[Page, bool]:
    page_changed = False
    layouts: List[Layout] = []
    for layout in page.layouts:
        new_layout, changed = rewrite_layout(layout, remap, page_id=page.id or "", inconsistencies=inconsistencies)
        layouts.append(new_layout)
        page_changed = page_changed or changed
    return page.model_copy(update={"layouts": layouts}), page_changed


def rewrite_pages(pages: Iterable[Page], remap: Mapping[str, str]) -> RewriteResult:
    result = RewriteResult()
    for page in pages:
        new_page, changed = rewrite_page(page, remap, result.inconsistencies)
        result.pages.append(new_page)
        if changed:
            result.changed_pages.append(new_page)
    return result
