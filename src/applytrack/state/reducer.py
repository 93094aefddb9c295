"""Pure state transitions for the explorer.

``reduce(state, action)`` never performs I/O and never mutates ``state``.
"""

from typing import Any, Dict, Optional

from applytrack.schemas.tree import ApplicationNode
from applytrack.state.actions import (
    Action,
    ApplicationsLoaded,
    BusyChanged,
    CursorChanged,
    CursorCleared,
    ErrorCleared,
    ErrorRaised,
    ExpansionToggled,
    ListingFailed,
    ListingLoaded,
    MultiSelectToggled,
    SelectionCleared,
    SelectionToggled,
    TreeLoaded,
)
from applytrack.state.models import ExplorerState, LoadStatus
from applytrack.state.tree_ops import (
    build_breadcrumb,
    carry_expansion,
    expansion_flags,
    find_application,
    toggle_expansion,
)


def _cleared_cursor() -> Dict[str, Any]:
    return {
        "selected": None,
        "application_id": None,
        "folder_id": None,
        "breadcrumb": [],
        "listing": None,
        "listing_status": LoadStatus.IDLE,
    }


def _current_folder_name(state: ExplorerState) -> Optional[str]:
    if state.breadcrumb and state.breadcrumb[-1].folder_id == state.folder_id:
        return state.breadcrumb[-1].name
    return None


def _with_breadcrumb(state: ExplorerState) -> ExplorerState:
    """Recompute the breadcrumb after the tree or cursor changed."""
    breadcrumb = build_breadcrumb(
        state.tree,
        state.application_id,
        state.folder_id,
        fallback_folder_name=_current_folder_name(state),
    )
    return state.model_copy(update={"breadcrumb": breadcrumb})


def reduce(state: ExplorerState, action: Action) -> ExplorerState:
    """Apply ``action`` to ``state`` and return the new state."""
    match action:
        case ApplicationsLoaded(applications=applications):
            previous = {node.id: node for node in state.tree}
            tree = []
            for application in applications:
                old = previous.get(application.id)
                if old is None:
                    tree.append(ApplicationNode(application=application))
                else:
                    # Keep already loaded folders and expansion until the next rebuild
                    tree.append(old.model_copy(update={"application": application}))

            update: Dict[str, Any] = {"applications": list(applications), "tree": tree}
            known_ids = {application.id for application in applications}
            if state.application_id is not None and state.application_id not in known_ids:
                update.update(_cleared_cursor())
            update["selection"] = {
                key: ref
                for key, ref in state.selection.items()
                if ref.application_id in known_ids
            }
            return _with_breadcrumb(state.model_copy(update=update))

        case TreeLoaded(application_id=application_id, folders=folders):
            app_node = find_application(state.tree, application_id)
            if app_node is None:
                return state
            children = carry_expansion(folders, expansion_flags(app_node.children))
            rebuilt = app_node.model_copy(update={"children": children, "loaded": True})
            tree = [rebuilt if node.id == application_id else node for node in state.tree]
            return _with_breadcrumb(state.model_copy(update={"tree": tree}))

        case CursorChanged(
            selected=selected,
            application_id=application_id,
            folder_id=folder_id,
            folder_name=folder_name,
        ):
            breadcrumb = build_breadcrumb(
                state.tree, application_id, folder_id, fallback_folder_name=folder_name
            )
            return state.model_copy(
                update={
                    "selected": selected,
                    "application_id": application_id,
                    "folder_id": folder_id,
                    "breadcrumb": breadcrumb,
                    "listing": None,
                    "listing_status": LoadStatus.LOADING,
                }
            )

        case CursorCleared():
            return state.model_copy(update=_cleared_cursor())

        case ListingLoaded(listing=listing):
            # A listing for a cursor we already left is stale
            if (
                listing.application_id != state.application_id
                or listing.folder_id != state.folder_id
            ):
                return state
            return state.model_copy(
                update={"listing": listing, "listing_status": LoadStatus.LOADED}
            )

        case ListingFailed(message=message):
            return state.model_copy(
                update={"listing_status": LoadStatus.ERROR, "error": message}
            )

        case ExpansionToggled(node_id=node_id, kind=kind):
            return state.model_copy(update={"tree": toggle_expansion(state.tree, node_id, kind)})

        case ErrorRaised(message=message):
            return state.model_copy(update={"error": message})

        case ErrorCleared():
            return state.model_copy(update={"error": None})

        case BusyChanged(busy=busy):
            return state.model_copy(update={"busy": busy})

        case MultiSelectToggled():
            enabled = not state.multi_select
            return state.model_copy(
                update={
                    "multi_select": enabled,
                    "selection": dict(state.selection) if enabled else {},
                }
            )

        case SelectionToggled(ref=ref):
            if not state.multi_select:
                return state
            selection = dict(state.selection)
            if ref.key in selection:
                del selection[ref.key]
            else:
                selection[ref.key] = ref
            return state.model_copy(update={"selection": selection})

        case SelectionCleared():
            return state.model_copy(update={"selection": {}})

        case _:  # pragma: no cover
            raise ValueError(f"Unexpected action: {action!r}")
