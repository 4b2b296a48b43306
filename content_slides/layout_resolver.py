"""
Slide layout selection and per-element target resolution.

An element either lands in an existing placeholder slot of the slide's
layout or gets a new shape at its own geometry. Slots are looked up by the
element's ``placeholder`` hint, with a fixed chain of content-like slots as
the fallback.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional, Sequence, Tuple

from pptx.enum.shapes import PP_PLACEHOLDER

logger = logging.getLogger(__name__)

BLANK_LAYOUT_NAME = "Blank"

PLACEHOLDER_HINTS = {
    'body': PP_PLACEHOLDER.BODY,
    'subtitle': PP_PLACEHOLDER.SUBTITLE,
    'chart': PP_PLACEHOLDER.CHART,
    'table': PP_PLACEHOLDER.TABLE,
    'picture': PP_PLACEHOLDER.PICTURE,
    'media': PP_PLACEHOLDER.MEDIA_CLIP,
    'object': PP_PLACEHOLDER.OBJECT,
}

# Tried in this order when the hinted slot type is absent
FALLBACK_SLOT_TYPES = (
    PP_PLACEHOLDER.BODY,
    PP_PLACEHOLDER.OBJECT,
    PP_PLACEHOLDER.VERTICAL_BODY,
    PP_PLACEHOLDER.MIXED,
)

TITLE_SLOT_TYPES = (PP_PLACEHOLDER.TITLE, PP_PLACEHOLDER.CENTER_TITLE)


class TargetKind(Enum):
    PLACEHOLDER = "placeholder"
    FALLBACK_PLACEHOLDER = "fallback_placeholder"
    NEW_SHAPE = "new_shape"


@dataclass
class Target:
    kind: TargetKind
    slot: Optional[object] = None  # python-pptx placeholder shape

    @property
    def is_slot(self) -> bool:
        return self.slot is not None


NEW_SHAPE = Target(TargetKind.NEW_SHAPE)


def first_matching(items: Iterable, predicates: Sequence[Callable]) -> Optional[object]:
    """
    Return the first item satisfying the earliest predicate that matches anything.

    Predicates are tried in order; each one scans every item before the next
    predicate is considered.
    """
    items = list(items)
    for predicate in predicates:
        for item in items:
            if predicate(item):
                return item
    return None


def _slot_type(shape):
    try:
        return shape.placeholder_format.type
    except ValueError:
        return None


def _is_type(slot_type) -> Callable:
    return lambda shape: _slot_type(shape) == slot_type


def resolve_slide_layout(prs, name: Optional[str] = None) -> Tuple[object, bool]:
    """
    Pick a slide layout for a new slide.

    Returns ``(layout, forced_blank)``. *forced_blank* is True when neither the
    named layout nor a layout called "Blank" exists; the caller then strips
    every placeholder from the slide built on the first layout.
    """
    layouts = list(prs.slide_layouts)
    if name:
        for layout in layouts:
            if layout.name == name:
                return layout, False
        logger.info("Layout %r not found, using %r", name, BLANK_LAYOUT_NAME)

    for layout in layouts:
        if layout.name == BLANK_LAYOUT_NAME:
            return layout, False

    logger.info("No %r layout in presentation; stripping placeholders from %r", BLANK_LAYOUT_NAME, layouts[0].name)
    return layouts[0], True


def add_slide(prs, layout_name: Optional[str] = None):
    """Append a slide built on the resolved layout."""
    layout, forced_blank = resolve_slide_layout(prs, layout_name)
    slide = prs.slides.add_slide(layout)
    if forced_blank:
        for placeholder in list(slide.placeholders):
            sp = placeholder._element
            sp.getparent().remove(sp)
    return slide


def find_title_slot(slide):
    """TITLE or CENTER_TITLE slot of *slide*, or None."""
    return first_matching(slide.placeholders, [_is_type(t) for t in TITLE_SLOT_TYPES])


def resolve_target(slide, element) -> Target:
    """
    Decide where *element* goes on *slide*.

    Without a (known) hint the element becomes a new shape. With a hint the
    slot of exactly that type wins, then the first content-like slot in
    ``FALLBACK_SLOT_TYPES`` order, then a new shape. Slots are not reserved,
    so two elements with the same hint end up in the same slot.
    """
    hint = (element.geometry.placeholder or '').strip().lower()
    if not hint:
        return NEW_SHAPE

    slot_type = PLACEHOLDER_HINTS.get(hint)
    if slot_type is None:
        logger.warning("Unknown placeholder hint %r on %s; adding a new shape", hint, element.kind)
        return NEW_SHAPE

    slots = list(slide.placeholders)
    slot = first_matching(slots, [_is_type(slot_type)])
    if slot is not None:
        logger.info("Found placeholder for %s: %s at %s,%s", hint, slot_type, slot.left, slot.top)
        return Target(TargetKind.PLACEHOLDER, slot)

    slot = first_matching(slots, [_is_type(t) for t in FALLBACK_SLOT_TYPES])
    if slot is not None:
        logger.info("Fallback placeholder for %s: %s at %s,%s", hint, _slot_type(slot), slot.left, slot.top)
        return Target(TargetKind.FALLBACK_PLACEHOLDER, slot)

    logger.info("No suitable placeholder for %s; falling back to new shape", hint)
    return NEW_SHAPE
