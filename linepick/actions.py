"""Named actions bound to keys.

Every action takes the ``Context`` and mutates it through its public
methods; cursor movement goes through the hub's paging channel so the view
applies it against the current page geometry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .context import Context
from .errors import OutOfRangeError
from .hub import PAGING_DOWN, PAGING_NEXT_PAGE, PAGING_PREVIOUS_PAGE, PAGING_UP

logger = logging.getLogger(__name__)

ACTION_PREFIX = "linepick."

Action = Callable[[Context], None]

ACTIONS: dict[str, Action] = {}


def register(name: str) -> Callable[[Action], Action]:
    def decorator(func: Action) -> Action:
        ACTIONS[ACTION_PREFIX + name] = func
        return func

    return decorator


def lookup(name: str) -> Action | None:
    return ACTIONS.get(name)


def _edited(ctx: Context, changed: bool) -> None:
    if changed:
        ctx.exec_query()
    ctx.draw_prompt()


def insert_text(ctx: Context, text: str) -> None:
    ctx.query_state.insert_at_caret(text)
    _edited(ctx, True)


# session
@register("Finish")
def finish(ctx: Context) -> None:
    if ctx.is_range_mode():
        ctx.materialize_range()
    if ctx.selection_len() == 0:
        ctx.selection_add(ctx.current_line())
    ctx.set_result(ctx.selected_lines())
    logger.debug("finish: %d line(s) selected", ctx.selection_len())
    ctx.stop()


@register("Cancel")
def cancel(ctx: Context) -> None:
    logger.debug("cancel")
    ctx.stop()


# caret
@register("ForwardChar")
def forward_char(ctx: Context) -> None:
    ctx.move_caret_pos(1)
    ctx.draw_prompt()


@register("BackwardChar")
def backward_char(ctx: Context) -> None:
    ctx.move_caret_pos(-1)
    ctx.draw_prompt()


@register("BeginningOfLine")
def beginning_of_line(ctx: Context) -> None:
    ctx.set_caret_pos(0)
    ctx.draw_prompt()


@register("EndOfLine")
def end_of_line(ctx: Context) -> None:
    ctx.set_caret_pos(ctx.query_len())
    ctx.draw_prompt()


# editing
@register("DeleteBackwardChar")
def delete_backward_char(ctx: Context) -> None:
    _edited(ctx, ctx.query_state.delete_backward_char())


@register("DeleteForwardChar")
def delete_forward_char(ctx: Context) -> None:
    _edited(ctx, ctx.query_state.delete_forward_char())


@register("DeleteBackwardWord")
def delete_backward_word(ctx: Context) -> None:
    _edited(ctx, ctx.query_state.delete_backward_word())


@register("KillEndOfLine")
def kill_end_of_line(ctx: Context) -> None:
    _edited(ctx, ctx.query_state.kill_end_of_line())


@register("KillBeginningOfLine")
def kill_beginning_of_line(ctx: Context) -> None:
    _edited(ctx, ctx.query_state.kill_beginning_of_line())


# cursor
@register("SelectUp")
def select_up(ctx: Context) -> None:
    ctx.hub.send_paging(PAGING_UP)


@register("SelectDown")
def select_down(ctx: Context) -> None:
    ctx.hub.send_paging(PAGING_DOWN)


@register("SelectPreviousPage")
def select_previous_page(ctx: Context) -> None:
    ctx.hub.send_paging(PAGING_PREVIOUS_PAGE)


@register("SelectNextPage")
def select_next_page(ctx: Context) -> None:
    ctx.hub.send_paging(PAGING_NEXT_PAGE)


# selection
@register("ToggleSelection")
def toggle_selection(ctx: Context) -> None:
    row = ctx.current_line()
    if ctx.selection_contains(row):
        ctx.selection_remove(row)
    else:
        ctx.selection_add(row)
    ctx.send_draw()


@register("ToggleSelectionAndSelectNext")
def toggle_selection_and_select_next(ctx: Context) -> None:
    toggle_selection(ctx)
    select_down(ctx)


@register("SelectAll")
def select_all(ctx: Context) -> None:
    buffer = ctx.current_line_buffer()
    for row in range(buffer.size()):
        ctx.selection_add(row)
    ctx.send_draw()


@register("SelectNone")
def select_none(ctx: Context) -> None:
    ctx.selection_clear()
    ctx.send_draw()


@register("InvertSelection")
def invert_selection(ctx: Context) -> None:
    buffer = ctx.current_line_buffer()
    for row in range(buffer.size()):
        try:
            buffer.line_at(row)
        except OutOfRangeError:
            break
        if ctx.selection_contains(row):
            ctx.selection_remove(row)
        else:
            ctx.selection_add(row)
    ctx.send_draw()


@register("ToggleRangeMode")
def toggle_range_mode(ctx: Context) -> None:
    if ctx.is_range_mode():
        ctx.materialize_range()
    else:
        ctx.start_range_mode()
    ctx.send_draw()


@register("CancelRangeMode")
def cancel_range_mode(ctx: Context) -> None:
    ctx.cancel_range_mode()
    ctx.send_draw()


# misc
@register("RotateFilter")
def rotate_filter(ctx: Context) -> None:
    current = ctx.rotate_filter()
    logger.debug("filter rotated to %s", current.name)
    if ctx.query_len() > 0:
        ctx.exec_query()
    ctx.send_draw()


@register("ToggleQuery")
def toggle_query(ctx: Context) -> None:
    _edited(ctx, ctx.query_state.toggle_saved_query())


@register("RefreshScreen")
def refresh_screen(ctx: Context) -> None:
    ctx.send_draw(purge=True)


def combine(steps: list[Action]) -> Action:
    """Return an action that runs ``steps`` in order."""

    def combined(ctx: Context) -> None:
        for step in steps:
            step(ctx)

    return combined


__all__ = ["ACTIONS", "ACTION_PREFIX", "Action", "combine", "insert_text", "lookup", "register"]
