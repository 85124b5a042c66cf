"""
Conversion Pipeline
Pre/Main/Post processing of the mask to solid fill conversion

Pre-processing records the mask state of every folder and then hides the
folder masks. Main processing converts each masked leaf layer into a fill
layer placed beneath it. Post-processing deletes the originals, clips the
fills, strips the temporary name suffix and restores the folder masks.

Any unexpected error, or a cancellation, restores the folder masks captured
in pre-processing before the session ends. Fill layers and deletions that
were already committed are kept.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from utils.session_log import ProgressCallback, SessionLog, emit_progress

from .cancellation import CancellationToken
from .data_structures import LayerNode, MaskStateRecord, SessionResult, SessionStatus
from .errors import HostError, OperationCancelled
from .host_interface import DocumentHost
from .mask_conversion import FILL_SUFFIX, ConversionSession, MaskConversionWorker
from .state_snapshot import MASK_ENABLED, VISIBLE, StateSnapshot
from .tree_walker import flatten_all, flatten_folders, flatten_leaves

CANCELLED_MESSAGE = "Cancelled by user."
NO_TARGETS_MESSAGE = "No masked layers found."


class ConversionState(str, Enum):
    IDLE = "idle"
    PRE_PROCESSING = "pre_processing"
    MAIN_PROCESSING = "main_processing"
    POST_PROCESSING = "post_processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


def strip_fill_suffix(name: str) -> str:
    if name.endswith(FILL_SUFFIX):
        return name[: -len(FILL_SUFFIX)]
    return name


class ConversionPipeline:
    """Runs one conversion session against a host."""

    def __init__(
        self,
        host: DocumentHost,
        token: Optional[CancellationToken] = None,
        log: Optional[SessionLog] = None,
        progress_callback: ProgressCallback = None,
    ):
        self.host = host
        self.token = token or CancellationToken()
        self.log = log or SessionLog()
        self.progress_callback = progress_callback
        self.session = ConversionSession()
        self.state = ConversionState.IDLE
        self.mask_records: List[MaskStateRecord] = []
        self.worker = MaskConversionWorker(host, self.log)

    # ------------------------------------------------------------------ #
    # Entry point
    # ------------------------------------------------------------------ #
    def run(self) -> SessionResult:
        """Execute all phases and return the session outcome."""
        try:
            if not self.host.has_document():
                self.log.error("No document is open")
                return SessionResult(SessionStatus.NO_DOCUMENT, "No document is open.")
            masked = [leaf for leaf in flatten_leaves(self.host) if leaf.has_mask]
        except HostError as exc:
            self.log.error(f"Error reading layers: {exc}")
            self._enter(ConversionState.FAILED)
            return SessionResult(SessionStatus.FAILED, str(exc))

        if not masked:
            self.log.warning(NO_TARGETS_MESSAGE)
            return SessionResult(SessionStatus.NO_TARGETS, NO_TARGETS_MESSAGE)
        self.log.info(f"Found {len(masked)} masked layer(s)")

        try:
            self.token.raise_if_cancelled()
            self.log.info("Step 1: Starting pre-processing...")
            self._enter(ConversionState.PRE_PROCESSING)
            self.pre_process()

            self.token.raise_if_cancelled()
            self.log.info("Step 2: Starting main conversion process...")
            self._enter(ConversionState.MAIN_PROCESSING)
            self.main_process()

            self.token.raise_if_cancelled()
            self.log.info("Step 3: Starting post-processing...")
            self._enter(ConversionState.POST_PROCESSING)
            self.post_process()
        except OperationCancelled:
            self.log.warning("Conversion cancelled by user")
            self.cleanup()
            self._enter(ConversionState.CANCELLED)
            return SessionResult(SessionStatus.CANCELLED, CANCELLED_MESSAGE)
        except Exception as exc:
            self.log.error(f"Error: {exc}")
            self.cleanup()
            self._enter(ConversionState.FAILED)
            return SessionResult(SessionStatus.FAILED, str(exc))

        self._enter(ConversionState.COMPLETED)
        self.log.success(
            f"All processing completed successfully ({len(self.session.records)} layer(s) converted)"
        )
        return SessionResult(SessionStatus.COMPLETED)

    def _enter(self, state: ConversionState):
        self.state = state

    # ------------------------------------------------------------------ #
    # Phases
    # ------------------------------------------------------------------ #
    def pre_process(self):
        """Record every folder's mask state, then hide the folder masks."""
        self.log.info("Saving folder mask states...")
        folders = flatten_folders(self.host)
        snapshot = StateSnapshot.capture(
            self.host, [folder.layer_id for folder in folders], (MASK_ENABLED, VISIBLE)
        )
        self.session.folder_mask_snapshot = snapshot
        self.mask_records = [
            MaskStateRecord(
                layer_id=entry.layer_id,
                name=entry.name,
                has_mask=entry.as_dict()[MASK_ENABLED],
                visible=entry.as_dict()[VISIBLE],
            )
            for entry in snapshot.entries
        ]
        masked_folders = [record for record in self.mask_records if record.has_mask]
        for record in masked_folders:
            self.log.info(f"Saved mask state for folder \"{record.name}\"")
        self.log.info(f"Saved mask states for {len(self.mask_records)} folders")

        self.log.info("Hiding folder masks...")
        with self.host.modal("Hide Folder Masks"):
            for record in masked_folders:
                self.host.set_mask_enabled(record.layer_id, False)
                self.log.info(f"Hiding mask for folder \"{record.name}\"")
        self.log.info("Pre-processing completed successfully")

    def main_process(self):
        """Convert every masked leaf layer, one progress step per leaf."""
        self.session.reset_registries()
        leaves: List[LayerNode] = flatten_leaves(self.host)

        for leaf in leaves:
            self.token.raise_if_cancelled()
            if leaf.has_mask and leaf.layer_id not in self.session.processed_ids:
                self.worker.convert(leaf, self.session)
            emit_progress(self.progress_callback, 1)

        self.log.info(
            f"Main processing completed: {len(self.session.records)} of {len(leaves)} layers converted"
        )

    def post_process(self):
        """Delete originals, clip fills, strip suffixes, restore folder masks."""
        self.log.info("Deleting original layers...")
        for layer_id in self.session.layers_to_delete:
            try:
                with self.host.modal("Remove Layer"):
                    name = self.host.get_layer(layer_id).name
                    self.host.delete_layer(layer_id)
                self.log.info(f"Removed layer \"{name}\"")
            except HostError as exc:
                self.log.error(f"Error removing layer {layer_id}: {exc}")

        self.log.info("Applying clipping masks...")
        for layer_id in self.session.fill_layers_to_clip:
            try:
                with self.host.modal("Create Clipping Mask"):
                    name = self.host.get_layer(layer_id).name
                    self.host.create_clipping_mask(layer_id)
                self.log.info(f"Created clipping mask for layer \"{name}\"")
            except HostError as exc:
                self.log.error(f"Error creating clipping mask for layer {layer_id}: {exc}")

        self.log.info(f"Renaming layers (removing '{FILL_SUFFIX}' suffix)...")
        # Applies to every layer in the document, including ones this session
        # did not create.
        with self.host.modal("Rename Layers"):
            for node in flatten_all(self.host):
                new_name = strip_fill_suffix(node.name)
                if new_name == node.name:
                    continue
                try:
                    self.host.set_name(node.layer_id, new_name)
                except HostError as exc:
                    self.log.error(f"Error renaming \"{node.name}\": {exc}")

        self.restore_folder_masks()
        self.log.info("Post-processing completed")

    # ------------------------------------------------------------------ #
    # Restore
    # ------------------------------------------------------------------ #
    def restore_folder_masks(self) -> int:
        snapshot = self.session.folder_mask_snapshot
        if snapshot is None:
            return 0
        with self.host.modal("Restore Folder Masks"):
            failures = snapshot.restore(self.host, self.log)
        if failures:
            self.log.warning(f"Folder masks restored with {failures} error(s)")
        else:
            self.log.info("All folder masks restored")
        return failures

    def cleanup(self):
        """Best-effort restore of the pre-processing state."""
        try:
            self.restore_folder_masks()
        except HostError as exc:
            self.log.error(f"Error during cleanup: {exc}")
