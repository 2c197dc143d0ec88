"""
Recursive folder listing for Google Drive.

Walks a folder tree depth-first and returns a flat list of every folder and every
matching file under a root folder, each annotated with its depth and its path
from the root. Folders are always listed without the file filters, so that
matching files deeper in the tree stay reachable; only file entries are filtered.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from gdrive_mcp.core.drives_config import DrivesConfigLoader
from gdrive_mcp.service.drive_service import GoogleDriveService
from gdrive_mcp.service.models import EntryKind, TraversalItem, TraversalRequest


logger = logging.getLogger(__name__)


class TraversalCancelled(Exception):
    """Raised when a recursive listing is cancelled before it completes."""


@dataclass
class _Frame:
    # Expand frame: list folder_id's children at depth, under path.
    folder_id: Optional[str] = None
    depth: int = 0
    path: str = ""
    # Folder entry to record right before its own expansion.
    entry: Optional[TraversalItem] = None
    # Emit frame: file entries of a level, appended once every folder subtree of that level is done.
    files: Optional[List[TraversalItem]] = None


@dataclass
class _TraversalState:
    items: List[TraversalItem] = field(default_factory=list)
    # Folder id -> shallowest depth it was scheduled for expansion at
    folder_depths: Dict[str, int] = field(default_factory=dict)
    seen_files: Set[str] = field(default_factory=set)
    depth_limited: int = 0


class TraversalEngine:
    """Depth-first, sequential folder tree expansion over the Drive listing client.

    Any listing failure aborts the whole traversal; nothing is returned for a
    partially walked tree.
    """

    def __init__(self, registry: DrivesConfigLoader, drive_service: GoogleDriveService):
        self.registry = registry
        self.drive_service = drive_service

    def traverse(
        self,
        request: TraversalRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[TraversalItem]:
        """List every folder and matching file under request.folder_id.

        Args:
            request: Root folder, optional drive id, depth limit and file filters.
            cancel_event: Optional signal checked between listing calls.

        Returns:
            Entries in traversal order: each folder is followed by its whole
            subtree, and the files of a level come after all of that level's
            folder subtrees.

        Raises:
            AccountNotFound: The requested drive is not configured.
            DriveListingError: A Drive listing call failed.
            TraversalCancelled: cancel_event was set.
        """
        drive_id, _ = self.registry.resolve_account(request.drive_id)
        state = _TraversalState(folder_depths={request.folder_id: 0})

        logger.info(
            f"Starting recursive listing of {request.folder_id} on drive {drive_id}; "
            f"max_depth:{request.max_depth};filters:{request.filters()}"
        )

        stack = [_Frame(folder_id=request.folder_id, depth=0, path="")]
        while stack:
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Recursive listing of {request.folder_id} cancelled")
                raise TraversalCancelled(f"Recursive listing of {request.folder_id} was cancelled")

            frame = stack.pop()

            if frame.files is not None:
                state.items.extend(frame.files)
                continue

            if frame.entry is not None:
                state.items.append(frame.entry)

            if frame.depth > request.max_depth:
                state.depth_limited += 1
                logger.info(
                    f"Max depth {request.max_depth} reached; not descending into "
                    f"{frame.folder_id} ({frame.path})"
                )
                continue

            stack.extend(self._expand(drive_id, frame, request, state))

        logger.info(
            f"Recursive listing of {request.folder_id} complete; items:{len(state.items)};"
            f"depth_limited_folders:{state.depth_limited}"
        )
        return state.items

    def _expand(
        self,
        drive_id: str,
        frame: _Frame,
        request: TraversalRequest,
        state: _TraversalState,
    ) -> List[_Frame]:
        """List one folder and return the frames to push, in stack order."""
        folders = self.drive_service.list_children(drive_id, frame.folder_id, EntryKind.FOLDER)
        files = self.drive_service.list_children(
            drive_id,
            frame.folder_id,
            EntryKind.FILE,
            modified_after=request.modified_after,
            mime_type=request.mime_type,
        )

        child_depth = frame.depth + 1
        folder_frames = []
        for folder in folders:
            known_depth = state.folder_depths.get(folder.id)
            if known_depth is None:
                state.folder_depths[folder.id] = child_depth
                entry = TraversalItem.from_entry(folder, frame.depth, frame.path)
                folder_frames.append(
                    _Frame(folder_id=folder.id, depth=child_depth, path=entry.path, entry=entry)
                )
            elif child_depth < known_depth and child_depth <= request.max_depth:
                # Recorded earlier at a deeper level: expand from here too, with no second entry
                state.folder_depths[folder.id] = child_depth
                folder_frames.append(
                    _Frame(folder_id=folder.id, depth=child_depth, path=f"{frame.path}/{folder.name}")
                )

        file_items = []
        for file in files:
            if file.id in state.seen_files:
                continue
            state.seen_files.add(file.id)
            file_items.append(TraversalItem.from_entry(file, frame.depth, frame.path))

        # Popped last-in first-out: folders in listing order, then this level's files
        return [_Frame(files=file_items)] + folder_frames[::-1]
